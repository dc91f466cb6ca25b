"""
Template loader module for the YAML server profile and script templates.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .constants import DEFAULT_PROFILE, TEMPLATES_DIR


class TemplateLoader:
    """Loads the server profile and text templates."""

    REQUIRED_FIELDS = ["name", "app_id", "executable", "service", "backup"]

    def __init__(
        self, profile_path: Optional[Path] = None, templates_dir: Optional[Path] = None
    ):
        self.profile_path = Path(profile_path) if profile_path else DEFAULT_PROFILE
        self.templates_dir = Path(templates_dir) if templates_dir else TEMPLATES_DIR
        self.profile: Dict[str, Any] = {}
        self._loaded = False

    def load_template(self, template_name: str) -> str:
        """Load a template file."""
        template_path = self.templates_dir / template_name
        if not template_path.exists():
            raise FileNotFoundError(f"Template not found: {template_path}")
        return template_path.read_text(encoding="utf-8")

    def _load_yaml_data(self) -> None:
        """Load the server profile from YAML."""
        if self._loaded:
            return

        if not self.profile_path.exists():
            raise FileNotFoundError(f"Server profile not found: {self.profile_path}")

        try:
            with open(self.profile_path, "r", encoding="utf-8") as file:
                data = yaml.safe_load(file)
        except (yaml.YAMLError, IOError) as e:
            raise RuntimeError(f"Failed to load server profile: {e}")

        if not isinstance(data, dict):
            raise RuntimeError(
                f"Server profile must be a mapping: {self.profile_path}"
            )

        self.profile = data
        self._loaded = True

    def get_profile(self) -> Dict[str, Any]:
        """Get the full server profile."""
        self._load_yaml_data()
        return self.profile

    def get_settings(self) -> Dict[str, Dict[str, Any]]:
        """Get operator setting definitions in prompt order."""
        self._load_yaml_data()
        return self.profile.get("settings") or {}

    def get_config_files(self) -> List[Dict[str, Any]]:
        self._load_yaml_data()
        return self.profile.get("config_files") or []

    def get_firewall_rules(self) -> List[Dict[str, Any]]:
        self._load_yaml_data()
        return self.profile.get("firewall") or []

    def get_packages(self) -> Dict[str, List[str]]:
        """Get runtime and tool package names."""
        self._load_yaml_data()
        packages = self.profile.get("packages") or {}
        return {
            "runtimes": list(packages.get("runtimes") or []),
            "tools": list(packages.get("tools") or []),
        }

    def get_required_hotfixes(self, build: int) -> List[str]:
        """Get hotfix IDs required on the given OS build."""
        self._load_yaml_data()
        hotfixes = (self.profile.get("prerequisites") or {}).get("hotfixes") or {}
        return list(hotfixes.get(build) or hotfixes.get(str(build)) or [])

    def validate_profile(self) -> List[str]:
        """Validate the profile and return list of issues."""
        self._load_yaml_data()
        issues = []

        for field in self.REQUIRED_FIELDS:
            if field not in self.profile:
                issues.append(f"Profile missing required field: {field}")

        for setting_id, setting in self.get_settings().items():
            setting = setting or {}
            if "prompt" not in setting:
                issues.append(f"Setting '{setting_id}' missing required field: prompt")
            if setting.get("type") == "int":
                for field in ["default", "min", "max"]:
                    if field == "default" and field not in setting:
                        issues.append(f"Setting '{setting_id}' needs a numeric default")
                    elif field in setting and not _is_int(setting[field]):
                        issues.append(
                            f"Setting '{setting_id}' has a non-numeric {field}: {setting[field]!r}"
                        )

        for index, config_file in enumerate(self.get_config_files()):
            if "path" not in config_file:
                issues.append(f"Config file #{index + 1} missing required field: path")

        for rule in self.get_firewall_rules():
            for field in ["name", "protocol", "port"]:
                if field not in rule:
                    issues.append(
                        f"Firewall rule '{rule.get('name', '?')}' missing required field: {field}"
                    )

        service = self.profile.get("service") or {}
        if "service" in self.profile and "name" not in service:
            issues.append("Service definition missing required field: name")

        backup = self.profile.get("backup") or {}
        if "backup" in self.profile:
            for field in ["task_name", "script"]:
                if field not in backup:
                    issues.append(f"Backup definition missing required field: {field}")

        return issues


def _is_int(value) -> bool:
    try:
        int(value)
    except (TypeError, ValueError):
        return False
    return True
