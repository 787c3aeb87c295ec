import mysql.connector

from src.hostel_core.hostel_core.database import bootstrap


class RecordingConnection:
    def __init__(self):
        self.statements = []
        self.committed = False
        self.closed = False

    def cursor(self):
        return self

    def execute(self, sql, params=()):
        self.statements.append(sql)

    def commit(self):
        self.committed = True

    def close(self):
        self.closed = True


DB = {"host": "db", "port": 3307, "user": "hostel", "password": "pw", "database": "hostel_db"}


def test_ensure_database_connects_without_selecting_a_schema(monkeypatch):
    calls = []
    conn = RecordingConnection()

    def fake_connect(**kwargs):
        calls.append(kwargs)
        return conn

    monkeypatch.setattr(mysql.connector, "connect", fake_connect)

    bootstrap.ensure_database_exists(DB)

    assert calls == [dict(host="db", port=3307, user="hostel", password="pw", use_pure=True)]
    assert "CREATE DATABASE IF NOT EXISTS `hostel_db`" in conn.statements[0]
    assert conn.committed and conn.closed
