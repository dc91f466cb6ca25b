"""
Configuration file generation for gameserver-setup.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .template_loader import TemplateLoader
from .utils import print_error, print_success, replace_placeholders


def write_config(
    path: Path, values: Mapping[str, Any], section: Optional[str] = None
) -> None:
    """Write ``key=value`` lines to ``path``, replacing any existing file."""
    lines = []
    if section:
        lines.append(f"[{section}]")
    for key, value in values.items():
        lines.append(f"{key}={value}")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


class ConfigWriter:
    """Renders the profile's config files and the backup script."""

    def __init__(self, loader: TemplateLoader):
        self.loader = loader

    def render_config_file(
        self, sections: Dict[str, Dict[str, Any]], values: Dict[str, str]
    ) -> str:
        """Render ``[section]`` blocks of ``key=value`` lines."""
        blocks = []
        for section, keys in sections.items():
            lines = [f"[{section}]"]
            for key, template in (keys or {}).items():
                lines.append(f"{key}={replace_placeholders(str(template), values)}")
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks) + "\n"

    def write_profile_configs(
        self, install_dir: Path, values: Dict[str, str]
    ) -> Dict[str, bool]:
        """
        Write every config file defined in the profile.

        Args:
            install_dir: Server install directory the paths are relative to
            values: Operator answers used for placeholder substitution

        Returns:
            Dictionary mapping file paths to success status
        """
        results = {}

        for config_file in self.loader.get_config_files():
            path = install_dir / config_file["path"]
            try:
                content = self.render_config_file(
                    config_file.get("sections") or {}, values
                )
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
                print_success(f"Created {path}")
                results[str(path)] = True
            except OSError as e:
                print_error(f"Failed to write {path}: {e}")
                results[str(path)] = False

        return results

    def write_backup_script(self, path: Path, values: Dict[str, str]) -> bool:
        """Render the PowerShell backup script to ``path``."""
        profile = self.loader.get_profile()
        template_name = profile["backup"]["script"]

        try:
            template = self.loader.load_template(template_name)
            replacements = dict(values)
            replacements.setdefault("name", profile.get("name", "game server"))
            content = replace_placeholders(template, replacements)

            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            print_success(f"Created {path}")
            return True
        except (FileNotFoundError, OSError) as e:
            print_error(f"Failed to write backup script: {e}")
            return False

    def write_setup_summary(
        self, path: Path, values: Dict[str, str], steps: List[str]
    ) -> bool:
        """Record the chosen settings next to the server for later reference."""
        profile = self.loader.get_profile()
        summary = {
            "server": profile.get("name", ""),
            "generated": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "completed_steps": ", ".join(steps),
        }
        summary.update(values)

        try:
            write_config(path, summary, section="gameserver-setup")
            print_success(f"Created {path}")
            return True
        except OSError as e:
            print_error(f"Failed to write setup summary: {e}")
            return False
