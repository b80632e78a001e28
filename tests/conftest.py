pytest_plugins = ["reviewreminder.testing.conftest"]
