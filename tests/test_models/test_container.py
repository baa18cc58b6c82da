"""Tests for container models."""

import pytest
from pydantic import ValidationError

from dbx.models.container import ContainerSpec, CreateOptions, derive_name


class TestDeriveName:
    """Test name derivation from image references."""

    def test_tag_separator_replaced(self):
        """Test that ':' becomes '-'."""
        assert derive_name("fedora-toolbox:35") == "fedora-toolbox-35"

    def test_registry_path_ignored(self):
        """Test that only the basename is used."""
        name = derive_name("ghcr.io/void-linux/void-linux:latest-full-x86_64")
        assert name == "void-linux-latest-full-x86_64"

    def test_dots_replaced(self):
        """Test that '.' becomes '-'."""
        assert derive_name("docker.io/library/ubuntu:22.04") == "ubuntu-22-04"


class TestContainerSpec:
    """Test ContainerSpec model."""

    def test_minimal_container_spec(self):
        """Test creating container spec with minimal fields."""
        spec = ContainerSpec(name="test", image="alpine:latest")

        assert spec.name == "test"
        assert spec.image == "alpine:latest"
        assert spec.rootful is False
        assert spec.init is False
        assert spec.nvidia is False
        assert spec.additional_flags == ()
        assert spec.clone is None
        assert spec.home_override is None

    def test_empty_name_rejected(self):
        """Test that the name must be non-empty."""
        with pytest.raises(ValidationError) as exc_info:
            ContainerSpec(name="", image="alpine")

        assert "name" in str(exc_info.value)

    def test_spec_is_immutable(self):
        """Test that a resolved spec cannot be mutated."""
        spec = ContainerSpec(name="test", image="alpine")

        with pytest.raises(ValidationError):
            spec.name = "other"

    def test_prefixed_home(self):
        """Test that a home prefix is joined with the container name."""
        spec = ContainerSpec(name="box", image="alpine", home_prefix="/data/homes")

        assert spec.home_override == "/data/homes/box"
        assert spec.effective_home("/home/alice") == "/data/homes/box"

    def test_custom_home_wins_over_prefix(self):
        """Test custom home precedence over the prefixed home."""
        spec = ContainerSpec(
            name="box",
            image="alpine",
            custom_home="/srv/box-home",
            home_prefix="/data/homes",
        )

        assert spec.home_override == "/srv/box-home"

    def test_host_home_by_default(self):
        """Test that the host home is used without overrides."""
        spec = ContainerSpec(name="box", image="alpine")

        assert spec.effective_home("/home/alice") == "/home/alice"


class TestCreateOptions:
    """Test CreateOptions model."""

    def test_defaults(self):
        """Test default run options."""
        options = CreateOptions(spec=ContainerSpec(name="test", image="alpine"))

        assert options.manager == "autodetect"
        assert options.always_pull is False
        assert options.non_interactive is False
        assert options.generate_entry is True
        assert options.dry_run is False
        assert options.sudo_program == "sudo"
