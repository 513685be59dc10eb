from PySide6.QtCore import Qt

from tailorbook.viewmodels.table_models import ListTableModel


def make_model(rows=()):
    return ListTableModel(
        (
            ("Name", lambda row: row["name"]),
            ("Amount", lambda row: row["amount"]),
        ),
        rows,
        numeric_columns=(1,),
    )


def test_display_values_and_headers():
    model = make_model([{"name": "Ravi", "amount": 2500}, {"name": "Anil", "amount": None}])

    assert model.rowCount() == 2
    assert model.columnCount() == 2
    assert model.headerData(1, Qt.Orientation.Horizontal) == "Amount"
    assert model.data(model.index(0, 1)) == "2500"
    assert model.data(model.index(1, 1)) == ""


def test_numeric_columns_align_right():
    model = make_model([{"name": "Ravi", "amount": 1}])
    alignment = model.data(model.index(0, 1), Qt.ItemDataRole.TextAlignmentRole)
    assert alignment & int(Qt.AlignmentFlag.AlignRight)


def test_update_and_row_access():
    model = make_model()
    model.update_rows([{"name": "Ravi", "amount": 1}])
    assert model.row_at(0)["name"] == "Ravi"
    assert model.row_at(5) is None
    assert len(model.rows()) == 1
    model.clear()
    assert model.rowCount() == 0
