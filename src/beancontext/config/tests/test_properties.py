# -*- coding: utf-8 -*-
"""
PYTHONPATH=src python -m pytest src/beancontext/config/tests/test_properties.py -v

Properties tests

Test the store, typed getters, the resolver chain and .env loading
"""

from datetime import timedelta

import pytest

from beancontext.config.properties import (
    EnvironmentResolver,
    InheritedResolver,
    MappingResolver,
    Properties,
    parse_bool,
    parse_duration,
)


class TestStore:
    """Test the key/value store"""

    def setup_method(self):
        self.props = Properties({"app.name": "demo", "app.workers": 4})

    def test_values_stored_as_strings(self):
        assert self.props.get("app.workers") == "4"
        assert self.props.get_string("app.name") == "demo"

    def test_set_remove_contains(self):
        self.props.set("app.mode", "fast")
        assert self.props.contains("app.mode")

        assert self.props.remove("app.mode") is True
        assert self.props.remove("app.mode") is False
        assert not self.props.contains("app.mode")

    def test_keys_and_to_dict(self):
        assert sorted(self.props.keys()) == ["app.name", "app.workers"]
        assert self.props.to_dict() == {"app.name": "demo", "app.workers": "4"}
        assert len(self.props) == 2

    def test_merge_properties_and_mapping(self):
        other = Properties({"app.name": "other", "db.host": "localhost"})
        self.props.merge(other)
        self.props.merge({"db.port": "5432"})

        assert self.props.get("app.name") == "other"
        assert self.props.get("db.host") == "localhost"
        assert self.props.get("db.port") == "5432"

    def test_clear(self):
        self.props.clear()
        assert self.props.keys() == []


class TestTypedGetters:
    """Test conversions and the error handler"""

    def setup_method(self):
        self.props = Properties(
            {
                "int": " 42 ",
                "bool": "t",
                "float": "2.5",
                "duration": "1h30m",
                "broken": "abc",
            }
        )

    def test_conversions(self):
        assert self.props.get_int("int") == 42
        assert self.props.get_bool("bool") is True
        assert self.props.get_float("float") == 2.5
        assert self.props.get_duration("duration") == timedelta(hours=1, minutes=30)

    def test_missing_keys_use_default(self):
        assert self.props.get_string("missing", "x") == "x"
        assert self.props.get_int("missing", 7) == 7
        assert self.props.get_bool("missing", True) is True
        assert self.props.get_duration("missing") == timedelta(0)

    def test_invalid_value_without_handler_logs(self, caplog):
        assert self.props.get_int("broken", 3) == 3
        assert any("broken" in r.getMessage() for r in caplog.records)

    def test_error_handler(self):
        errors = []
        self.props.set_error_handler(lambda key, e: errors.append((key, type(e))))

        assert self.props.get_bool("broken", False) is False
        assert self.props.get_duration("broken", timedelta(seconds=1)) == timedelta(seconds=1)
        assert errors == [("broken", ValueError), ("broken", ValueError)]

    def test_get_value_dispatch(self):
        assert self.props.get_value("int", int, 0) == 42
        assert self.props.get_value("float", float, 0.0) == 2.5
        assert self.props.get_value("bool", bool, False) is True
        assert self.props.get_value("duration", timedelta, None) == timedelta(minutes=90)
        assert self.props.get_value("int", str, None) == " 42 "


class TestParsers:
    """Test boolean and duration parsing"""

    @pytest.mark.parametrize("text", ["1", "t", "T", "true", "TRUE", "True", "on"])
    def test_true_values(self, text):
        assert parse_bool(text) is True

    @pytest.mark.parametrize("text", ["0", "f", "F", "false", "FALSE", "False", "off"])
    def test_false_values(self, text):
        assert parse_bool(text) is False

    @pytest.mark.parametrize("text", ["yes", "", "tRuE", "2"])
    def test_invalid_bool(self, text):
        with pytest.raises(ValueError):
            parse_bool(text)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("0", timedelta(0)),
            ("300ms", timedelta(milliseconds=300)),
            ("1.5s", timedelta(seconds=1.5)),
            ("2h45m", timedelta(hours=2, minutes=45)),
            ("-2m", -timedelta(minutes=2)),
            ("+10s", timedelta(seconds=10)),
            ("1500us", timedelta(microseconds=1500)),
            ("1m0.5s", timedelta(seconds=60.5)),
        ],
    )
    def test_durations(self, text, expected):
        assert parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "10", "1x", "s", "1h 30m", "-"])
    def test_invalid_durations(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)


class TestResolverChain:
    """Test priority ordered resolvers"""

    def test_higher_priority_wins(self):
        props = Properties({"key": "store"})
        props.register_resolver(MappingResolver({"key": "low", "other": "low"}, priority=10))
        props.register_resolver(MappingResolver({"key": "high"}, priority=500))

        assert props.get("key") == "high"
        assert props.get("other") == "low"

    def test_store_beats_lower_priority(self):
        props = Properties({"key": "store"})
        props.register_resolver(MappingResolver({"key": "low"}, priority=0))
        assert props.get("key") == "store"

    def test_equal_priority_keeps_registration_order(self):
        props = Properties()
        props.register_resolver(MappingResolver({"key": "first"}, priority=5))
        props.register_resolver(MappingResolver({"key": "second"}, priority=5))
        assert props.get("key") == "first"

    def test_resolvers_sorted(self):
        props = Properties()
        low = MappingResolver({}, priority=1)
        high = MappingResolver({}, priority=300)
        props.register_resolver(low).register_resolver(high)

        assert props.resolvers() == [high, props, low]

    def test_cannot_register_itself(self):
        props = Properties()
        with pytest.raises(ValueError):
            props.register_resolver(props)

    def test_environment_resolver(self, monkeypatch):
        monkeypatch.setenv("SERVER_HTTP_PORT", "9090")
        monkeypatch.setenv("server.name", "exact")
        props = Properties({"server.http-port": "80"})
        props.register_resolver(EnvironmentResolver())

        # Environment has priority over the store by default
        assert props.get_int("server.http-port") == 9090
        assert props.get("server.name") == "exact"
        assert props.get("server.missing") is None

    def test_environment_resolver_prefix(self, monkeypatch):
        monkeypatch.setenv("MYAPP_DB_HOST", "db.internal")
        props = Properties()
        props.register_resolver(EnvironmentResolver(priority=50, prefix="myapp."))
        assert props.get("db.host") == "db.internal"

    def test_inherited_resolver(self):
        parent = Properties({"shared": "parent", "only.parent": "yes"})
        child = Properties({"shared": "child"})
        child.register_resolver(InheritedResolver(parent))

        assert child.get("shared") == "child"
        assert child.get("only.parent") == "yes"


class TestEnvFile:
    """Test .env loading through python-dotenv"""

    def test_load_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "DB_HOST=localhost\n"
            "DB_PORT=5432\n"
            'GREETING="hello world"\n'
            "export TIMEOUT=5s\n"
        )
        props = Properties()

        assert props.load_env_file(env_file) == 4
        assert props.get("DB_HOST") == "localhost"
        assert props.get_int("DB_PORT") == 5432
        assert props.get("GREETING") == "hello world"
        assert props.get_duration("TIMEOUT") == timedelta(seconds=5)

    def test_missing_env_file(self, tmp_path):
        props = Properties()
        assert props.load_env_file(tmp_path / "missing.env") == 0
        assert props.keys() == []
