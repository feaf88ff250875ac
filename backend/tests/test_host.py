"""Tests for the plugin host's registration and reload semantics."""

import sys
import pytest

from plugin_bootstrap.plugin_runtime.host import (
    Plugin,
    PluginHost,
    is_plugin,
    load_module,
    module_name_for,
    unwrap_exports,
)
from plugin_fixtures import APPLY_MODULE, COUNTING_MODULE, PASSIVE_MODULE, execution_count, write_plugin_root


class TestCapability:

    def test_module_with_apply_is_a_plugin(self, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'handler.py': APPLY_MODULE})
        module = load_module(root / 'handler.py')

        assert isinstance(module, Plugin)
        assert is_plugin(module)

    def test_module_without_apply_is_passive(self, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'lib.py': PASSIVE_MODULE})
        module = load_module(root / 'lib.py')

        assert not is_plugin(module)
        assert module.VALUE == 42

    def test_default_export_is_unwrapped(self, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'index.py': '''
            class _Addon:
                def apply(self, host, options):
                    host.provide('addon', self)

            default = _Addon()
        '''})
        module = load_module(root / 'index.py')

        exports = unwrap_exports(module)

        assert exports is module.default
        assert is_plugin(exports)

    def test_load_module_registers_in_sys_modules(self, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'lib.py': PASSIVE_MODULE})
        path = str(root / 'lib.py')

        module = load_module(path)

        assert sys.modules[module_name_for(path)] is module

    def test_failed_import_is_not_left_in_sys_modules(self, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'lib.py': "raise ValueError('nope')\n"})
        path = str(root / 'lib.py')

        with pytest.raises(ValueError):
            load_module(path)
        assert module_name_for(path) not in sys.modules


class TestReloadPlugin:

    def test_apply_receives_host_and_options(self, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'handler.py': '''
            def apply(host, options):
                host.provide('seen_options', options)
        '''})
        host = PluginHost()

        host.reload_plugin(root / 'handler.py', {'x': 1})

        assert host.get('seen_options') == {'x': 1}
        assert str(root / 'handler.py') in host.plugins

    def test_reload_tears_down_previous_registration(self, host, events, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'handler.py': APPLY_MODULE})
        path = str(root / 'handler.py')

        host.reload_plugin(path, {})
        host.reload_plugin(path, {})

        assert [kind for kind, _ in events] == ['apply', 'dispose', 'apply']
        assert list(host.plugins) == [path]

    def test_explicit_identity_is_used(self, host, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'model.py': APPLY_MODULE})

        host.reload_plugin(root / 'model.py', {}, 'ns/model/foo')

        record = host.plugins['ns/model/foo']
        assert record.path == str(root / 'model.py')

    def test_preloaded_module_is_not_imported_again(self, host, tmp_path):
        path = write_plugin_root(tmp_path, 'foo', {'handler.py': COUNTING_MODULE}) / 'handler.py'
        module = load_module(path)

        host.reload_plugin(path, {}, module=module)

        assert execution_count(path) == 1
        assert host.plugins[str(path)].module is module

    def test_reload_keeps_fresh_module_in_sys_modules(self, host, tmp_path):
        path = write_plugin_root(tmp_path, 'foo', {'handler.py': COUNTING_MODULE}) / 'handler.py'
        host.reload_plugin(path, {}, module=load_module(path))

        fresh = load_module(path)
        host.reload_plugin(path, {}, module=fresh)

        assert sys.modules[module_name_for(str(path))] is fresh
        assert execution_count(path) == 2

    def test_module_without_apply_is_rejected(self, host, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'lib.py': PASSIVE_MODULE})

        with pytest.raises(TypeError):
            host.reload_plugin(root / 'lib.py', {})
        assert host.plugins == {}

    def test_failing_apply_leaves_nothing_registered(self, host, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'handler.py': '''
            def apply(host, options):
                raise RuntimeError('apply failed')
        '''})

        with pytest.raises(RuntimeError):
            host.reload_plugin(root / 'handler.py', {})
        assert host.plugins == {}

    def test_unload_unknown_identity(self, host):
        assert host.unload_plugin('missing') is False

    def test_dispose_failure_does_not_block_reload(self, host, events, tmp_path):
        root = write_plugin_root(tmp_path, 'foo', {'handler.py': '''
            def apply(host, options):
                host.get('events').append('apply')

            def dispose(host):
                raise RuntimeError('dispose failed')
        '''})
        path = root / 'handler.py'

        host.reload_plugin(path, {})
        host.reload_plugin(path, {})

        assert events == ['apply', 'apply']
