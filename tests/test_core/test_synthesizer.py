"""Tests for command synthesis."""

from dataclasses import replace

import pytest

from dbx.core.synthesizer import build_mount_plan, resolve_hostname, synthesize
from dbx.models.container import ContainerSpec, CreateOptions
from dbx.providers.docker import DockerManager
from dbx.providers.podman import PodmanManager


PODMAN_ONLY = ["--ulimit", "--systemd=always", "--userns", "--annotation", "--mount", "--runtime=crun"]


def _options(**spec_fields):
    fields = {"name": "test", "image": "alpine:latest"}
    fields.update(spec_fields)
    return CreateOptions(spec=ContainerSpec(**fields))


@pytest.fixture
def podman():
    return PodmanManager(euid=1000)


@pytest.fixture
def docker():
    return DockerManager(euid=1000)


class TestSynthesize:
    """Test the assembled create command."""

    def test_namespaces_and_privileges(self, host_probe, utilities, podman):
        """Test host namespace sharing and privileged creation."""
        command = synthesize(_options(), host_probe, utilities, podman)

        assert command.values("--ipc") == ["host"]
        assert command.values("--network") == ["host"]
        assert command.values("--pid") == ["host"]
        assert command.has_flag("--privileged")
        assert command.values("--user") == ["root:root"]
        assert "label=disable" in command.values("--security-opt")

    def test_init_mode_keeps_own_pid_namespace(self, host_probe, utilities, podman):
        """Test that init mode does not share the host PID namespace."""
        command = synthesize(_options(init=True), host_probe, utilities, podman)

        assert not command.has_flag("--pid")
        assert command.values("--ipc") == ["host"]
        assert command.has_flag("--systemd=always")
        assert command.values("--hostname") == ["test.workstation"]

    def test_hostname(self, host_probe):
        """Test hostname resolution."""
        assert resolve_hostname(ContainerSpec(name="a", image="b"), host_probe) == "workstation"
        spec = ContainerSpec(name="a", image="b", hostname="custom")
        assert resolve_hostname(spec, host_probe) == "custom"

    def test_podman_rootless_flags(self, host_probe, utilities, podman):
        """Test podman-only flags for a rootless container."""
        command = synthesize(_options(), host_probe, utilities, podman)

        assert command.values("--annotation") == ["run.oci.keep_original_groups=1"]
        assert command.values("--mount") == ["type=devpts,destination=/dev/pts"]
        assert command.values("--ulimit") == ["host"]
        assert command.values("--userns") == ["keep-id"]
        assert not command.has_flag("--systemd=always")
        assert not command.has_flag("--runtime=crun")

    def test_podman_rootful_skips_keep_id(self, host_probe, utilities):
        """Test that keep-id is only used rootless."""
        manager = PodmanManager(rootful=True, euid=1000)

        command = synthesize(_options(rootful=True), host_probe, utilities, manager)

        assert not command.has_flag("--userns")
        assert command.argv()[:3] == ["sudo", "podman", "create"]

    def test_crun_runtime(self, host_probe, utilities, podman):
        """Test crun selection when available."""
        probe = replace(host_probe, crun_available=True)

        command = synthesize(_options(), probe, utilities, podman)

        assert command.has_flag("--runtime=crun")

    @pytest.mark.parametrize("init", [False, True])
    @pytest.mark.parametrize("rootful", [False, True])
    def test_docker_never_gets_podman_flags(self, host_probe, utilities, init, rootful):
        """Test that docker receives no backend-exclusive flags."""
        manager = DockerManager(rootful=rootful, euid=1000)
        probe = replace(host_probe, crun_available=True)

        command = synthesize(_options(init=init, rootful=rootful), probe, utilities, manager)

        for flag in PODMAN_ONLY:
            assert not command.has_flag(flag)
        line = command.render()
        assert "--ulimit" not in line
        assert "keep-id" not in line

    def test_environment(self, host_probe, utilities, podman):
        """Test environment passed to the container."""
        command = synthesize(_options(), host_probe, utilities, podman)
        env = command.values("--env")

        assert "SHELL=zsh" in env
        assert "HOME=/home/alice" in env
        assert "container=podman" in env
        assert "CONTAINER_ID=test" in env
        assert not any(v.startswith("DBX_HOST_HOME=") for v in env)

    def test_custom_home_exports_host_home(self, host_probe, utilities, podman):
        """Test the host home pointer for custom homes."""
        command = synthesize(_options(custom_home="/srv/box"), host_probe, utilities, podman)
        env = command.values("--env")

        assert "HOME=/srv/box" in env
        assert "DBX_HOST_HOME=/home/alice" in env
        assert "/srv/box:/srv/box:rslave" in command.values("--volume")

    def test_custom_home_beats_prefix(self, host_probe, utilities, podman):
        """Test that custom home wins entirely over a prefixed home."""
        options = _options(custom_home="/srv/box", home_prefix="/data/homes")

        command = synthesize(options, host_probe, utilities, podman)

        assert "/data/homes" not in command.render()
        assert "HOME=/srv/box" in command.values("--env")

    def test_prefixed_home(self, host_probe, utilities, podman):
        """Test prefixed home resolution."""
        command = synthesize(_options(home_prefix="/data/homes"), host_probe, utilities, podman)

        assert "HOME=/data/homes/test" in command.values("--env")
        assert "DBX_HOST_HOME=/home/alice" in command.values("--env")
        assert command.entrypoint_args[4].value == "/data/homes/test"

    def test_entrypoint_vector(self, host_probe, utilities, podman):
        """Test the trailing entrypoint argument vector."""
        options = _options(
            nvidia=True,
            pre_init_hooks="echo pre",
            init_hooks="echo post",
            additional_packages=("git", "vim"),
        )

        argv = synthesize(options, host_probe, utilities, podman).argv()
        tail = argv[argv.index("--entrypoint"):]

        assert tail == [
            "--entrypoint", "/usr/bin/entrypoint",
            "alpine:latest",
            "--verbose",
            "--name", "alice",
            "--user", "1000",
            "--group", "1000",
            "--home", "/home/alice",
            "--init", "0",
            "--nvidia", "1",
            "--pre-init-hooks", "echo pre",
            "--additional-packages", "git vim",
            "--", "echo post",
        ]

    def test_additional_flags_stay_before_entrypoint(self, host_probe, utilities, podman):
        """Test that user flags cannot move the entrypoint boundary."""
        options = _options(additional_flags=("--entrypoint", "/bin/sh", "--cap-add", "ALL"))

        argv = synthesize(options, host_probe, utilities, podman).argv()

        assert argv[-2:] == ["--", ""]
        override = len(argv) - 1 - argv[::-1].index("--entrypoint")
        assert argv[override + 1] == "/usr/bin/entrypoint"
        assert argv.index("--cap-add") < override

    def test_deterministic(self, host_probe, utilities, podman):
        """Test that synthesis is a pure function."""
        first = synthesize(_options(), host_probe, utilities, podman)
        second = synthesize(_options(), host_probe, utilities, podman)

        assert first == second


class TestBuildMountPlan:
    """Test mount plan policies."""

    def test_always_present(self, host_probe, utilities):
        """Test mounts present on every host."""
        plan = build_mount_plan(ContainerSpec(name="t", image="i"), host_probe, utilities)
        volumes = [m.to_volume() for m in plan]

        assert volumes[:8] == [
            "/:/run/host:rslave",
            "/dev:/dev:rslave",
            "/sys:/sys:rslave",
            "/tmp:/tmp:rslave",
            "/usr/bin/dbx-init:/usr/bin/entrypoint:ro",
            "/usr/bin/dbx-export:/usr/bin/dbx-export:ro",
            "/usr/bin/dbx-host-exec:/usr/bin/dbx-host-exec:ro",
            "/home/alice:/home/alice:rslave",
        ]
        assert len(plan) == 8

    def test_conditional_mounts(self, host_probe, utilities):
        """Test mounts driven by probe results."""
        probe = replace(
            host_probe,
            selinux=True,
            journal=True,
            shm_target="/run/shm",
            store_paths=("/nix",),
            xdg_runtime_dir="/run/user/1000",
            var_home="/var/home/alice",
            identity_files=("/etc/hosts", "/etc/localtime", "/etc/resolv.conf"),
        )

        plan = build_mount_plan(ContainerSpec(name="t", image="i"), probe, utilities)
        volumes = [m.to_volume() for m in plan]

        assert "/sys/fs/selinux:/sys/fs/selinux" in volumes
        assert "/var/log/journal:/var/log/journal" in volumes
        assert "/run/shm:/run/shm" in volumes
        assert "/nix:/nix:rslave" in volumes
        assert "/run/user/1000:/run/user/1000:rslave" in volumes
        assert "/var/home/alice:/var/home/alice:rslave" in volumes
        assert volumes[-3:] == [
            "/etc/hosts:/etc/hosts:ro",
            "/etc/localtime:/etc/localtime:ro",
            "/etc/resolv.conf:/etc/resolv.conf:ro",
        ]

    def test_init_skips_session_mounts(self, host_probe, utilities):
        """Test that init containers keep their own shm and runtime dir."""
        probe = replace(host_probe, shm_target="/run/shm", xdg_runtime_dir="/run/user/1000")

        plan = build_mount_plan(ContainerSpec(name="t", image="i", init=True), probe, utilities)

        assert "/run/shm" not in plan.host_paths()
        assert "/run/user/1000" not in plan.host_paths()

    def test_var_home_not_duplicated(self, host_probe, utilities):
        """Test that /var/home is skipped when it is the effective home."""
        probe = replace(host_probe, home="/var/home/alice", var_home="/var/home/alice")

        plan = build_mount_plan(ContainerSpec(name="t", image="i"), probe, utilities)

        assert plan.host_paths().count("/var/home/alice") == 1

    def test_user_volumes_last(self, host_probe, utilities):
        """Test that user volumes follow the built-in mounts."""
        spec = ContainerSpec(name="t", image="i", volumes=("/opt:/opt:ro", "/srv"))

        plan = build_mount_plan(spec, host_probe, utilities)

        assert [m.to_volume() for m in plan][-2:] == ["/opt:/opt:ro", "/srv:/srv"]
