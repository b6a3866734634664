"""
Tests for the option catalogue and capability detection.
"""

import shutil

from updatewiz.catalog.definitions import CATALOGUE, all_options, get_option
from updatewiz.utils import system
from updatewiz.utils.system import detect, detect_all, get_host_info


class TestCatalogue:
    def test_ids_unique(self):
        ids = [o.id for o in all_options()]
        assert len(ids) == len(set(ids))

    def test_env_key(self):
        assert get_option("brew").env_key == "skip_brew"

    def test_category_matches_group(self):
        for category, options in CATALOGUE.items():
            assert all(o.category == category for o in options.values())

    def test_unknown_option(self):
        assert get_option("emacs") is None


class TestDetect:
    def test_present(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: f"/usr/bin/{name}")
        assert detect("brew") is True

    def test_absent(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        assert detect("brew") is False

    def test_probes_catalogue_binary(self, monkeypatch):
        probed = []
        monkeypatch.setattr(shutil, "which", lambda name: probed.append(name))
        detect("nix_env")
        assert probed == ["nix-env"]

    def test_nothing_to_probe_is_unknown(self):
        assert detect("omz") is None

    def test_probe_failure_degrades_to_unknown(self, monkeypatch):
        def broken(name):
            raise PermissionError("denied")
        monkeypatch.setattr(shutil, "which", broken)
        assert detect("brew") is None

    def test_unknown_id_probed_directly(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: "/bin/sh" if name == "sh" else None)
        assert detect("sh") is True

    def test_detect_all_covers_catalogue(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        results = detect_all()
        assert set(results) == {o.id for o in all_options()}
        assert results["brew"] is False
        assert results["self_update"] is None


class TestHostInfo:
    def test_keys(self):
        info = get_host_info()
        assert {"os", "os_version", "shell"} <= set(info)

    def test_supported_platform(self, monkeypatch):
        monkeypatch.setattr(system.platform, "system", lambda: "Darwin")
        assert system.is_supported_platform()
        monkeypatch.setattr(system.platform, "system", lambda: "Windows")
        assert not system.is_supported_platform()
