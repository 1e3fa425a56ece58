"""Configuration management for upm."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from ..utils.exceptions import ConfigError
from ..utils.helpers import load_yaml, save_yaml, ensure_dir, slugify

WORKSPACE_ENV = 'UPM_WORKSPACE'

DEFAULT_SETTINGS: Dict[str, Any] = {
    'default_category': 'Other',
    'default_experience_level': 'intermediate',
    'hours_per_day': 8,
}


@dataclass
class Config:
    """
    Global configuration for upm.

    Manages workspace paths and configuration settings.
    """

    workspace_dir: str = field(default_factory=lambda: os.environ.get(WORKSPACE_ENV, '.upm'))
    projects_dir: str = 'projects'
    logs_dir: str = 'logs'
    config_file: str = 'config.yaml'

    # Runtime settings
    verbose: bool = False
    quiet: bool = False
    no_color: bool = False

    def __post_init__(self):
        self._workspace_path = Path(self.workspace_dir)
        self._projects_path = self._workspace_path / self.projects_dir
        self._logs_path = self._workspace_path / self.logs_dir
        self._config_path = self._workspace_path / self.config_file

    @property
    def workspace_path(self) -> Path:
        return self._workspace_path

    @property
    def projects_path(self) -> Path:
        return self._projects_path

    @property
    def logs_path(self) -> Path:
        return self._logs_path

    @property
    def config_path(self) -> Path:
        return self._config_path

    def get_project_dir(self, project_name: str) -> Path:
        """Get directory for a specific project."""
        return self._projects_path / slugify(project_name)

    def get_project_file(self, project_name: str) -> Path:
        """Get project.yaml file path."""
        return self.get_project_dir(project_name) / 'project.yaml'

    def get_tasks_file(self, project_name: str) -> Path:
        """Get tasks.yaml file path (tasks plus progress states)."""
        return self.get_project_dir(project_name) / 'tasks.yaml'

    def init_workspace(self) -> None:
        """Initialize workspace structure."""
        ensure_dir(str(self._workspace_path))
        ensure_dir(str(self._projects_path))
        ensure_dir(str(self._logs_path))

        if not self._config_path.exists():
            default_config = {
                'version': '1.0.0',
                'projects_dir': self.projects_dir,
                'logs_dir': self.logs_dir,
                'settings': dict(DEFAULT_SETTINGS),
            }
            save_yaml(default_config, str(self._config_path))

        gitignore_path = self._workspace_path / '.gitignore'
        if not gitignore_path.exists():
            gitignore_content = """# upm - Ignore logs
logs/
*.log
*.log.*
"""
            gitignore_path.write_text(gitignore_content, encoding='utf-8')

    def workspace_exists(self) -> bool:
        """Check if workspace is initialized."""
        return self._workspace_path.exists() and self._config_path.exists()

    def require_workspace(self) -> None:
        if not self.workspace_exists():
            raise ConfigError("Workspace not initialized. Run 'upm init' first.")

    def project_exists(self, project_name: str) -> bool:
        return self.get_project_file(project_name).exists()

    def list_projects(self) -> list[str]:
        """List project directory names in the workspace."""
        if not self._projects_path.exists():
            return []

        projects = []
        for item in self._projects_path.iterdir():
            if item.is_dir() and (item / 'project.yaml').exists():
                projects.append(item.name)

        return sorted(projects)

    def load_config_file(self) -> dict:
        """Load configuration from file."""
        if not self._config_path.exists():
            return {}
        data = load_yaml(str(self._config_path))
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config file: {self._config_path}")
        return data

    def get_setting(self, key: str) -> Any:
        """Read a setting, falling back to the built-in default."""
        settings = self.load_config_file().get('settings') or {}
        return settings.get(key, DEFAULT_SETTINGS.get(key))

    def save_config_file(self, config_data: dict) -> None:
        save_yaml(config_data, str(self._config_path))

    @classmethod
    def from_args(cls, **kwargs) -> 'Config':
        """Create config from command-line arguments."""
        return cls(**{k: v for k, v in kwargs.items() if v is not None})
