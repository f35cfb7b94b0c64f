# -*- coding: utf-8 -*-
"""
PYTHONPATH=src python -m pytest src/beancontext/config/tests/test_load_env.py -v

.env loading tests
"""

import os

from beancontext.config.load_env import load_env_file, read_env_file
from beancontext.di.collector import PropertySource
from beancontext.di.context import new_context


class TestReadEnvFile:
    def test_keys_without_value_skipped(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("NAME=demo\nEMPTY=\nBARE\n")

        assert read_env_file(env_file) == {"NAME": "demo", "EMPTY": ""}

    def test_missing_file(self, tmp_path):
        assert read_env_file(tmp_path / "nope.env") == {}


class TestLoadEnvFile:
    def test_exports_to_environment(self, tmp_path, monkeypatch):
        monkeypatch.delenv("BEANCONTEXT_TEST_TOKEN", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("BEANCONTEXT_TEST_TOKEN=secret\n")
        try:
            assert load_env_file(env_file, check_env_var="BEANCONTEXT_TEST_TOKEN") is True
            assert os.environ["BEANCONTEXT_TEST_TOKEN"] == "secret"
        finally:
            os.environ.pop("BEANCONTEXT_TEST_TOKEN", None)

    def test_check_env_var_missing(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("OTHER=1\n")
        assert load_env_file(env_file, check_env_var="BEANCONTEXT_NEVER_SET") is False

    def test_missing_file(self, tmp_path):
        assert load_env_file(tmp_path / "nope.env") is False


class TestPropertySourceFile:
    def test_context_reads_env_file(self, tmp_path):
        env_file = tmp_path / "app.env"
        env_file.write_text("server.port=7000\n")

        ctx = new_context(PropertySource(path=env_file))
        assert ctx.properties.get_int("server.port") == 7000
