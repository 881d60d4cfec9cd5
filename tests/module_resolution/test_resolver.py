"""Tests for ModuleResolver formatter resolution and dispose."""

from types import SimpleNamespace
from unittest.mock import Mock
from unittest.mock import patch

import pytest
from conftest import TEST_ROOT_MARKER
from conftest import FakePrompt
from conftest import StaticSettings
from conftest import install_formatter
from conftest import write_manifest
from formatter_resolver import bundled
from formatter_resolver.errors import GlobalLookupError
from formatter_resolver.messages import FAILED_TO_LOAD_MODULE_MESSAGE
from formatter_resolver.messages import INVALID_FORMATTER_PATH_MESSAGE
from formatter_resolver.messages import OUTDATED_FORMATTER_VERSION_MESSAGE
from formatter_resolver.messages import USING_BUNDLED_FORMATTER
from formatter_resolver.module_resolution.global_paths import GlobalPathLocator
from formatter_resolver.module_resolution.global_paths import PackageManager
from formatter_resolver.module_resolution.loader import ImportlibModuleLoader
from formatter_resolver.module_resolution.resolver import ModuleResolver
from formatter_resolver.module_resolution.walker import marker_file_predicate
from formatter_resolver.paths import Workspace


def make_resolver(log, settings=None, prompt=None, **kwargs):
    return ModuleResolver(
        log,
        settings or StaticSettings(),
        prompt,
        stop_at=marker_file_predicate(TEST_ROOT_MARKER),
        **kwargs,
    )


def global_locator(tmp_path, package_manager=PackageManager.NPM):
    root = tmp_path / "global" / "lib" / "node_modules"
    root.mkdir(parents=True)
    strategy = Mock(return_value=root)
    return GlobalPathLocator({package_manager: strategy}), root, strategy


class TestLocalResolution:
    @pytest.mark.asyncio
    async def test_local_dev_dependency_is_used_and_cached(self, log, project):
        write_manifest(project, dev_dependencies={"prettier": "^2.0.0"})
        install_formatter(project, version="2.3.0")
        resolver = make_resolver(log)
        file_name = project / "src" / "a.js"

        first = await resolver.get_formatter_instance(file_name)
        second = await resolver.get_formatter_instance(file_name)

        assert first is not None
        assert first is not resolver.get_bundled_instance()
        assert first.__version__ == "2.3.0"
        assert second is first
        assert "Local formatter module path: '" in log.messages("debug")[-1]

    @pytest.mark.asyncio
    async def test_same_path_is_loaded_once(self, log, project):
        write_manifest(project, dev_dependencies={"prettier": "^2.0.0"})
        install_formatter(project)
        loader = Mock(wraps=ImportlibModuleLoader(log))
        resolver = make_resolver(log, loader=loader)

        await resolver.get_formatter_instance(project / "src" / "a.js")
        await resolver.get_formatter_instance(project / "src" / "b.js")

        loader.load.assert_called_once()

    @pytest.mark.asyncio
    async def test_outdated_local_version_is_rejected_without_fallback(self, log, project):
        write_manifest(project, dev_dependencies={"prettier": "^1.0.0"})
        package_dir = install_formatter(project, version="1.0.0")
        resolver = make_resolver(log)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is None

        assert OUTDATED_FORMATTER_VERSION_MESSAGE in log.messages("error")
        assert f"Attempted to load formatter module from {(package_dir / '__init__.py').resolve()}" in log.messages(
            "info"
        )
        assert resolver.caches.modules == {}

    @pytest.mark.asyncio
    async def test_module_missing_queries_is_rejected(self, log, project):
        write_manifest(project, dev_dependencies={"prettier": "^2.0.0"})
        install_formatter(project, surface=("format", "get_support_info"))

        assert await make_resolver(log).get_formatter_instance(project / "src" / "a.js") is None
        assert OUTDATED_FORMATTER_VERSION_MESSAGE in log.messages("error")

    @pytest.mark.asyncio
    async def test_declared_but_not_installed_is_terminal(self, log, project):
        write_manifest(project, dev_dependencies={"prettier": "^2.0.0"})
        prompt = FakePrompt(0)
        resolver = make_resolver(log, StaticSettings(resolve_global_modules=True), prompt)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is None

        assert f"Attempted to determine module path from {project}" in log.messages("info")
        assert FAILED_TO_LOAD_MODULE_MESSAGE in log.messages("error")
        # No global lookup and no bundled fallback
        assert prompt.calls == []

    @pytest.mark.asyncio
    async def test_broken_local_module_is_terminal(self, log, project):
        write_manifest(project, dev_dependencies={"prettier": "^2.0.0"})
        install_formatter(project, source="raise ImportError('broken install')\n")
        resolver = make_resolver(log)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is None
        assert FAILED_TO_LOAD_MODULE_MESSAGE in log.messages("error")

    @pytest.mark.asyncio
    async def test_filesystem_error_during_walk_is_terminal(self, log, project, monkeypatch):
        error = PermissionError("denied")
        monkeypatch.setattr(
            "formatter_resolver.module_resolution.walker.ManifestWalker.find_package", Mock(side_effect=error)
        )
        prompt = FakePrompt(0)
        resolver = make_resolver(log, StaticSettings(resolve_global_modules=True), prompt)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is None

        assert "Attempted to determine module path from package.json" in log.messages("info")
        assert ("error", FAILED_TO_LOAD_MODULE_MESSAGE, error) in log.records
        assert prompt.calls == []

    @pytest.mark.asyncio
    async def test_cache_hit_skips_validation(self, log, project, monkeypatch):
        write_manifest(project, dev_dependencies={"prettier": "^2.0.0"})
        install_formatter(project)
        resolver = make_resolver(log)
        file_name = project / "src" / "a.js"
        instance = await resolver.get_formatter_instance(file_name)

        validate = Mock()
        monkeypatch.setattr("formatter_resolver.module_resolution.resolver.validate", validate)

        assert await resolver.get_formatter_instance(file_name) is instance
        validate.assert_not_called()


class TestExplicitPath:
    @pytest.mark.asyncio
    async def test_workspace_relative_prettier_path(self, log, project):
        package_dir = install_formatter(project / "tools", version="2.5.0")
        settings = StaticSettings(Workspace([project]), prettier_path="tools/node_modules/prettier")
        resolver = make_resolver(log, settings, workspace=settings.workspace)

        instance = await resolver.get_formatter_instance(project / "src" / "a.js")

        assert instance is not None
        assert instance.__version__ == "2.5.0"
        assert resolver.caches.get_module(package_dir) is instance

    @pytest.mark.asyncio
    async def test_explicit_path_to_non_formatter_is_invalid(self, log, project):
        install_formatter(project / "tools", surface=("get_support_info", "get_file_info", "resolve_config"))
        settings = StaticSettings(Workspace([project]), prettier_path="tools/node_modules/prettier")
        resolver = make_resolver(log, settings, workspace=settings.workspace)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is None
        assert log.messages("error") == [INVALID_FORMATTER_PATH_MESSAGE]

    @pytest.mark.asyncio
    async def test_unexpandable_home_in_explicit_path_is_terminal(self, log, project):
        settings = StaticSettings(Workspace([project]), prettier_path="~no_such_user_xyz/prettier")
        resolver = make_resolver(log, settings, workspace=settings.workspace)

        with patch("formatter_resolver.paths.Path.expanduser", side_effect=RuntimeError("no home")):
            assert await resolver.get_formatter_instance(project / "src" / "a.js") is None

        assert "Attempted to determine module path from ~no_such_user_xyz/prettier" in log.messages("info")
        assert FAILED_TO_LOAD_MODULE_MESSAGE in log.messages("error")

    @pytest.mark.asyncio
    async def test_explicit_path_outside_any_workspace_falls_back(self, log, project):
        settings = StaticSettings(Workspace(), prettier_path="tools/node_modules/prettier")
        resolver = make_resolver(log, settings, workspace=settings.workspace)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is bundled


class TestGlobalResolution:
    @pytest.mark.asyncio
    async def test_global_module_used_when_no_local_copy(self, log, project, tmp_path):
        locator, root, _ = global_locator(tmp_path)
        install_formatter(root.parent, version="3.1.0")
        prompt = FakePrompt(0)
        resolver = make_resolver(log, StaticSettings(resolve_global_modules=True), prompt, locator=locator)

        instance = await resolver.get_formatter_instance(project / "src" / "a.js")

        assert instance is not None
        assert instance.__version__ == "3.1.0"
        assert prompt.calls == [(["npm", "pnpm", "yarn"], "Choose package manager")]

    @pytest.mark.asyncio
    async def test_cancelled_choice_falls_back_to_bundled(self, log, project, tmp_path):
        locator, _, strategy = global_locator(tmp_path)
        resolver = make_resolver(log, StaticSettings(resolve_global_modules=True), FakePrompt(-1), locator=locator)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is bundled
        strategy.assert_not_called()

    @pytest.mark.asyncio
    async def test_dismissed_choice_falls_back_to_bundled(self, log, project):
        resolver = make_resolver(log, StaticSettings(resolve_global_modules=True), FakePrompt(None))

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is bundled

    @pytest.mark.asyncio
    async def test_global_root_without_package_falls_back(self, log, project, tmp_path):
        locator, _, _ = global_locator(tmp_path)
        resolver = make_resolver(log, StaticSettings(resolve_global_modules=True), FakePrompt(0), locator=locator)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is bundled

    @pytest.mark.asyncio
    async def test_global_lookup_not_attempted_when_disabled(self, log, project):
        prompt = FakePrompt(0)
        resolver = make_resolver(log, StaticSettings(resolve_global_modules=False), prompt)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is bundled
        assert prompt.calls == []

    @pytest.mark.asyncio
    async def test_global_lookup_failure_propagates(self, log, project):
        locator = GlobalPathLocator({PackageManager.PNPM: Mock(side_effect=GlobalLookupError("pnpm", "boom"))})
        resolver = make_resolver(log, StaticSettings(resolve_global_modules=True), FakePrompt(1), locator=locator)

        with pytest.raises(GlobalLookupError):
            await resolver.get_formatter_instance(project / "src" / "a.js")


class TestBundledFallback:
    @pytest.mark.asyncio
    async def test_nothing_found_returns_bundled(self, log, project):
        resolver = make_resolver(log)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is bundled
        assert log.messages("debug") == [USING_BUNDLED_FORMATTER]

    @pytest.mark.asyncio
    async def test_only_local_version_never_returns_bundled(self, log, project, tmp_path):
        locator, root, _ = global_locator(tmp_path)
        install_formatter(root.parent)
        settings = StaticSettings(only_use_local_version=True, resolve_global_modules=False)
        resolver = make_resolver(log, settings, FakePrompt(0), locator=locator)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is None
        assert "Ignored bundled formatter by onlyUseLocalVersion configuration." in log.messages("info")

    @pytest.mark.asyncio
    async def test_only_local_version_still_uses_global_module(self, log, project, tmp_path):
        locator, root, _ = global_locator(tmp_path)
        install_formatter(root.parent, version="3.1.0")
        settings = StaticSettings(only_use_local_version=True, resolve_global_modules=True)
        resolver = make_resolver(log, settings, FakePrompt(0), locator=locator)

        instance = await resolver.get_formatter_instance(project / "src" / "a.js")

        assert instance is not None
        assert instance is not bundled
        assert instance.__version__ == "3.1.0"
        assert "Ignored bundled formatter by onlyUseLocalVersion configuration." not in log.messages("info")

    @pytest.mark.asyncio
    async def test_only_local_version_with_empty_global_root(self, log, project, tmp_path):
        locator, _, _ = global_locator(tmp_path)
        settings = StaticSettings(only_use_local_version=True, resolve_global_modules=True)
        resolver = make_resolver(log, settings, FakePrompt(0), locator=locator)

        assert await resolver.get_formatter_instance(project / "src" / "a.js") is None
        assert log.messages("debug").count(USING_BUNDLED_FORMATTER) == 0


class TestDispose:
    @pytest.mark.asyncio
    async def test_dispose_clears_module_cache_and_reloads(self, log, project):
        write_manifest(project, dev_dependencies={"prettier": "^2.0.0"})
        install_formatter(project)
        loader = Mock(wraps=ImportlibModuleLoader(log))
        bundled_module = SimpleNamespace(clear_config_cache=Mock())
        resolver = make_resolver(log, loader=loader, bundled_module=bundled_module)
        file_name = project / "src" / "a.js"

        first = await resolver.get_formatter_instance(file_name)
        path_cache = dict(resolver.caches.paths)
        resolver.dispose()

        assert resolver.caches.modules == {}
        assert resolver.caches.paths == path_cache
        bundled_module.clear_config_cache.assert_called_once_with()
        assert first.CLEARED == [True]

        second = await resolver.get_formatter_instance(file_name)

        assert loader.load.call_count == 2
        assert second is not first

    def test_dispose_logs_module_clearing_errors(self, log):
        bundled_module = SimpleNamespace(clear_config_cache=Mock())
        resolver = make_resolver(log, bundled_module=bundled_module)
        error = RuntimeError("cannot clear")
        broken = SimpleNamespace(clear_config_cache=Mock(side_effect=error))
        healthy = SimpleNamespace(clear_config_cache=Mock())
        resolver.caches.set_module("/a", broken)
        resolver.caches.set_module("/b", healthy)

        resolver.dispose()

        assert ("error", "Error clearing module cache.", error) in log.records
        healthy.clear_config_cache.assert_called_once_with()
        assert resolver.caches.modules == {}
