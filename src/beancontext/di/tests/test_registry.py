# -*- coding: utf-8 -*-
"""
PYTHONPATH=src python -m pytest src/beancontext/di/tests/test_registry.py -v

Registry tests
"""

import threading

from beancontext.di.bean_definition import Bean, next_bean_id
from beancontext.di.registry import ReadWriteLock, Registry
from beancontext.di.tests.test_fixtures import (
    MySQLUserRepository,
    PostgreSQLUserRepository,
    UserRepository,
)


class TestRegistry:
    """Test capability and name indexes"""

    def setup_method(self):
        self.registry = Registry()
        self.mysql = Bean(next_bean_id(), MySQLUserRepository())
        self.postgres = Bean(next_bean_id(), PostgreSQLUserRepository())

    def test_find_by_type_keeps_insertion_order(self):
        self.registry.add_bean(UserRepository, self.postgres)
        self.registry.add_bean(UserRepository, self.mysql)

        beans, found = self.registry.find_by_type(UserRepository)
        assert found is True
        assert beans == [self.postgres, self.mysql]

    def test_find_by_name(self):
        self.registry.add_bean(UserRepository, self.mysql)

        beans, found = self.registry.find_by_name("mysqluserrepository")
        assert found is True
        assert beans == [self.mysql]

    def test_not_found(self):
        assert self.registry.find_by_type(UserRepository) == ([], False)
        assert self.registry.find_by_name("missing") == ([], False)

    def test_add_beans_skips_duplicates(self):
        self.registry.add_beans(UserRepository, [self.mysql, self.postgres, self.mysql])
        self.registry.add_bean(MySQLUserRepository, self.mysql)

        beans, _ = self.registry.find_by_type(UserRepository)
        assert beans == [self.mysql, self.postgres]
        beans, _ = self.registry.find_by_name("mysqluserrepository")
        assert beans == [self.mysql]

    def test_returned_list_is_a_copy(self):
        self.registry.add_bean(UserRepository, self.mysql)
        beans, _ = self.registry.find_by_type(UserRepository)
        beans.clear()

        assert self.registry.find_by_type(UserRepository)[0] == [self.mysql]

    def test_types(self):
        self.registry.add_bean(UserRepository, self.mysql)
        self.registry.add_bean(MySQLUserRepository, self.mysql)
        assert set(self.registry.types()) == {UserRepository, MySQLUserRepository}


class TestReadWriteLock:
    """Test reader and writer exclusion"""

    def test_readers_share(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=5)

        def reader():
            with lock.read_locked():
                inside.wait()

        thread = threading.Thread(target=reader)
        thread.start()
        with lock.read_locked():
            # Both readers hold the lock at the same time
            inside.wait()
        thread.join(timeout=5)
        assert not thread.is_alive()

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events = []
        writer_in = threading.Event()

        def reader():
            writer_in.wait(timeout=5)
            with lock.read_locked():
                events.append("read")

        thread = threading.Thread(target=reader)
        thread.start()
        with lock.write_locked():
            writer_in.set()
            # Give the reader a chance to run into the lock
            thread.join(timeout=0.2)
            events.append("write")
        thread.join(timeout=5)

        assert events == ["write", "read"]
