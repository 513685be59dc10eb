from tailorbook.services.collection_feed import CollectionFeed


def test_listeners_receive_full_snapshot_copies():
    feed = CollectionFeed("things")
    first, second = [], []
    feed.subscribe(first.append)
    feed.subscribe(second.append)

    source = [1, 2, 3]
    feed.publish(source)
    first[0].append(99)

    assert second == [[1, 2, 3]]
    assert source == [1, 2, 3]
    assert feed.name == "things"


def test_unsubscribe_and_clear():
    feed = CollectionFeed("things")
    received = []
    unsubscribe = feed.subscribe(received.append)
    feed.publish(["a"])
    unsubscribe()
    unsubscribe()
    feed.publish(["b"])
    assert received == [["a"]]

    feed.subscribe(received.append)
    feed.clear()
    feed.publish(["c"])
    assert received == [["a"]]


def test_listener_may_unsubscribe_during_publish():
    feed = CollectionFeed("things")
    calls = []

    def once(snapshot):
        calls.append(snapshot)
        unsubscribe()

    unsubscribe = feed.subscribe(once)
    feed.publish([1])
    feed.publish([2])
    assert calls == [[1]]
