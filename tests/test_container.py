from attendflow.container import build_container
from attendflow.database.bootstrap import SCHEMA_PATH, _iter_sql_statements, _strip_comments
from attendflow.notifications.channel import LoggingNotificationChannel


def test_build_container_wires_mysql_stores_without_connecting():
    container = build_container(
        db_config={"host": "localhost", "user": "root", "password": "", "database": "attendflow"},
        sweep_interval_seconds=30,
    )

    assert isinstance(container.notifier, LoggingNotificationChannel)
    assert container.team_service is not None
    assert container.conn is not None
    assert not container.sweeper.running


def test_schema_statements():
    statements = list(_iter_sql_statements(_strip_comments(SCHEMA_PATH.read_text(encoding="utf-8"))))

    assert len(statements) == 6
    assert all(stmt.startswith("CREATE TABLE IF NOT EXISTS") for stmt in statements)
    assert any("open_slot" in stmt for stmt in statements)
