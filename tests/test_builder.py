"""Tests for ConfigBuilder.build."""

import pytest
from strata_config import ConfigBuilder
from strata_config import ProfileTypeConfig


@pytest.fixture
def fruit_type():
    """Create a profile type with template and non-template properties."""
    return ProfileTypeConfig(
        type="fruit",
        schema={
            "properties": {
                "color": {"type": "string", "includeInTemplate": True},
                "size": {"type": "number", "includeInTemplate": True, "optionDefinition": {"defaultValue": 3}},
                "ripe": {"type": ["boolean", "string"], "includeInTemplate": True},
                "notes": {"type": "string"},
                "secret": {"type": "string", "includeInTemplate": True, "secure": True},
            }
        },
    )


class TestBuild:
    """Test ConfigBuilder.build."""

    def test_without_populating(self, fruit_type):
        """Test profiles are created empty without populate_properties."""
        config = ConfigBuilder.build([fruit_type])

        assert config["profiles"] == {"fruit": {"type": "fruit", "properties": {}, "secure": []}}
        assert config["defaults"] == {}
        assert config["autoStore"] is True

    def test_populate(self, fruit_type):
        """Test template properties get defaults and secure names are recorded."""
        config = ConfigBuilder.build([fruit_type], populate_properties=True)

        profile = config["profiles"]["fruit"]
        assert profile["properties"] == {"color": "", "size": 3, "ripe": False}
        assert profile["secure"] == ["secret"]
        assert config["defaults"] == {"fruit": "fruit"}

    def test_secure_value_callback(self, fruit_type):
        """Test the callback supplies secure values."""
        calls = []

        def get_value(name, prop):
            calls.append(name)
            return "s3cret"

        config = ConfigBuilder.build([fruit_type], populate_properties=True, get_value=get_value)

        assert config["profiles"]["fruit"]["properties"]["secret"] == "s3cret"
        assert calls == ["secret"]

    def test_secure_value_none_not_stored(self, fruit_type):
        """Test None from the callback leaves the property out."""
        config = ConfigBuilder.build([fruit_type], populate_properties=True, get_value=lambda name, prop: None)
        assert "secret" not in config["profiles"]["fruit"]["properties"]

    @pytest.mark.parametrize(
        ("prop_type", "expected"),
        [("string", ""), ("number", 0), ("object", {}), ("array", []), ("boolean", False), ("mystery", None)],
    )
    def test_type_defaults(self, prop_type, expected):
        """Test empty values follow the declared type."""
        profile_type = ProfileTypeConfig(
            type="t", schema={"properties": {"p": {"type": prop_type, "includeInTemplate": True}}}
        )
        config = ConfigBuilder.build([profile_type], populate_properties=True)
        assert config["profiles"]["t"]["properties"]["p"] == expected

    def test_option_default_none_kept(self):
        """Test an explicit default of None is used as is."""
        profile_type = ProfileTypeConfig(
            type="t",
            schema={
                "properties": {
                    "p": {"type": "string", "includeInTemplate": True, "optionDefinition": {"defaultValue": None}},
                    "q": {"type": "string", "includeInTemplate": True, "optionDefinition": {}},
                }
            },
        )
        config = ConfigBuilder.build([profile_type], populate_properties=True)
        assert config["profiles"]["t"]["properties"] == {"p": None, "q": ""}


class TestHoist:
    """Test moving shared values into the base profile."""

    @staticmethod
    def profile_type(name, default):
        return ProfileTypeConfig(
            type=name,
            schema={
                "properties": {
                    "host": {"type": "string", "includeInTemplate": True, "optionDefinition": {"defaultValue": "h"}},
                    "port": {"type": "number", "includeInTemplate": True, "optionDefinition": {"defaultValue": default}},
                }
            },
        )

    @pytest.fixture
    def base_type(self):
        """Create a base profile type."""
        return ProfileTypeConfig(
            type="base",
            schema={"properties": {"user": {"type": "string", "includeInTemplate": True}}},
        )

    def test_shared_value_hoisted(self, base_type):
        """Test a value shared by all child profiles moves to the base profile."""
        config = ConfigBuilder.build(
            [self.profile_type("zosmf", 443), self.profile_type("tso", 23), base_type],
            populate_properties=True,
            base_profile_type="base",
        )

        profiles = config["profiles"]
        assert profiles["base"]["properties"] == {"host": "h", "user": ""}
        assert list(profiles["base"]["properties"]) == ["host", "user"]
        assert profiles["zosmf"]["properties"] == {"port": 443}
        assert profiles["tso"]["properties"] == {"port": 23}

    def test_single_child_not_hoisted(self, base_type):
        """Test a value defined by only one child profile stays put."""
        config = ConfigBuilder.build(
            [self.profile_type("zosmf", 443), base_type], populate_properties=True, base_profile_type="base"
        )

        assert config["profiles"]["zosmf"]["properties"] == {"host": "h", "port": 443}
        assert config["profiles"]["base"]["properties"] == {"user": ""}

    def test_missing_base_profile(self):
        """Test naming a base type with no profile changes nothing."""
        config = ConfigBuilder.build(
            [self.profile_type("zosmf", 1), self.profile_type("tso", 1)],
            populate_properties=True,
            base_profile_type="base",
        )
        assert config["profiles"]["zosmf"]["properties"] == {"host": "h", "port": 1}
