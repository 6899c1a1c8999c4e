import pytest

from gridsql.catalog import ColumnCatalog


@pytest.fixture
def catalog():
    return ColumnCatalog.from_dict(
        {
            "status": {"dbName": "db_status", "type": "TEXT"},
            "x": {"dbName": "db_x"},
            "name": {"dbName": "name", "type": "TEXT"},
            "id": {"dbName": "id", "type": "NUMBER"},
            "total": {"dbName": "order_total", "type": "NUMBER"},
        }
    )


GRIDS_YAML = """
grids:
  orders:
    query: SELECT id, status, total FROM SALES.ORDERS
    defaultSortField: id
    maxPageSize: 50
    columns:
      id: {dbName: id, type: NUMBER}
      status: {dbName: db_status, type: TEXT}
      total: {dbName: order_total, type: NUMBER}
"""


@pytest.fixture
def grids_file(tmp_path):
    path = tmp_path / "grids.yaml"
    path.write_text(GRIDS_YAML, encoding="utf-8")
    return path
