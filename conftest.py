"""Root pytest configuration: load the automock plugin and pytester."""

pytest_plugins = ["automock.plugin", "pytester"]
