from hrms.database.bootstrap import _prepare_script, iter_sql_statements
from hrms.database.connection import DBConfig


def test_statements_split_on_semicolons_outside_quotes():
    sql = "CREATE TABLE a (id INT);\nINSERT INTO a VALUES ('x;y');\nSELECT \"q;\" FROM a"

    assert list(iter_sql_statements(sql)) == [
        "CREATE TABLE a (id INT)",
        "INSERT INTO a VALUES ('x;y')",
        'SELECT "q;" FROM a',
    ]


def test_escaped_quote_does_not_end_literal():
    sql = r"INSERT INTO notes VALUES ('it\'s; fine');"

    assert list(iter_sql_statements(sql)) == [r"INSERT INTO notes VALUES ('it\'s; fine')"]


def test_empty_statements_are_skipped():
    assert list(iter_sql_statements(" ;; \n ; ")) == []


def test_prepare_script_drops_database_switch_and_comments():
    sql = "CREATE DATABASE hrms;\nUSE hrms;\n-- seed\nCREATE TABLE t (id INT);\n"

    assert list(iter_sql_statements(_prepare_script(sql))) == ["CREATE TABLE t (id INT)"]


def test_db_config_defaults_and_connect_params():
    config = DBConfig.from_dict({"host": "db", "port": "3307"})

    assert config.port == 3307
    assert config.database == "hrms_db"
    assert config.connect_params(with_database=False) == {
        "host": "db",
        "port": 3307,
        "user": "root",
        "password": "",
    }
