import os
import unittest
from unittest.mock import patch

import config


class ContainersPathTests(unittest.TestCase):
    def test_defaults_to_relative_containers_dir(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_containers_path() == "containers"

    def test_env_override(self) -> None:
        with patch.dict(
            os.environ,
            {"EXTRACTS_CONTAINERS_PATH": "/data/containers"},
            clear=True,
        ):
            assert config.get_containers_path() == "/data/containers"


class ToolCommandTests(unittest.TestCase):
    def test_default_commands(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_osm_convert_command() == "osmconvert"
            assert config.get_osm_update_command() == "pyosmium-up-to-date"

    def test_blank_override_falls_back(self) -> None:
        with patch.dict(os.environ, {"OSM_CONVERT_COMMAND": "  "}, clear=True):
            assert config.get_osm_convert_command() == "osmconvert"

    def test_command_override(self) -> None:
        with patch.dict(
            os.environ,
            {"OSM_UPDATE_COMMAND": "/opt/pyosmium/bin/pyosmium-up-to-date"},
            clear=True,
        ):
            assert (
                config.get_osm_update_command()
                == "/opt/pyosmium/bin/pyosmium-up-to-date"
            )


class TimeoutTests(unittest.TestCase):
    def test_defaults_are_one_hour(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_fetch_timeout() == 3600
            assert config.get_tool_timeout() == 3600

    def test_override(self) -> None:
        with patch.dict(os.environ, {"EXTRACT_TOOL_TIMEOUT": "120"}, clear=True):
            assert config.get_tool_timeout() == 120

    def test_invalid_values_fall_back(self) -> None:
        for value in ("abc", "0", "-5"):
            with patch.dict(os.environ, {"EXTRACT_FETCH_TIMEOUT": value}, clear=True):
                assert config.get_fetch_timeout() == 3600


class CorsOriginsTests(unittest.TestCase):
    def test_parses_comma_separated_list(self) -> None:
        with patch.dict(
            os.environ,
            {"CORS_ALLOWED_ORIGINS": "http://a.test, ,http://b.test"},
            clear=True,
        ):
            assert config.get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_unset_is_empty(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert config.get_cors_origins() == []
