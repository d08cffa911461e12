
# Root conftest to ensure pytest-asyncio is loaded early
import pytest_asyncio.plugin


def pytest_configure(config):
    # the entry point registers the plugin as "asyncio"
    manager = config.pluginmanager
    if not (manager.hasplugin("asyncio") or manager.is_registered(pytest_asyncio.plugin)):
        manager.register(pytest_asyncio.plugin, name="asyncio")
