"""Install saafsafai as a systemd user service that runs at login."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

SERVICE_NAME = "saafsafai.service"
BINARY_NAME = "saafsafai"

UNIT_TEMPLATE = """\
[Unit]
Description=Saafsafai Cleanup Service
After=default.target

[Service]
Type=oneshot
ExecStart={exec_start}
Environment=HOME={home}

[Install]
WantedBy=default.target
"""

logger = logging.getLogger(__name__)


def default_exec_start() -> str:
    """Command line systemd should run.

    Prefers the installed console script, falls back to the current interpreter.
    """
    if script := shutil.which(BINARY_NAME):
        return script
    return f"{sys.executable} -m saafsafai.main"


@dataclass
class InstallResult:
    """Result of a service installation."""

    unit_path: Path
    exec_start: str
    failed_commands: list[str] = field(default_factory=list)

    @property
    def enabled(self) -> bool:
        return not self.failed_commands


class SystemdInstaller:
    """Writes and enables the systemd user unit."""

    def __init__(self, home: Path | None = None, exec_start: str | None = None) -> None:
        self.home = home or Path.home()
        self.exec_start = exec_start or default_exec_start()

    @property
    def unit_dir(self) -> Path:
        return self.home / ".config/systemd/user"

    @property
    def unit_path(self) -> Path:
        return self.unit_dir / SERVICE_NAME

    def render_unit(self) -> str:
        return UNIT_TEMPLATE.format(exec_start=self.exec_start, home=self.home)

    def install(self) -> InstallResult:
        """Write the unit file, then reload systemd and enable the unit.

        Failing systemctl calls are logged and reported, not raised.

        Returns:
            InstallResult with the unit path and any failed commands.

        Raises:
            OSError: If the unit file cannot be written.

        """
        self.unit_dir.mkdir(parents=True, exist_ok=True)
        self.unit_path.write_text(self.render_unit(), encoding="utf-8")
        logger.info("Wrote systemd unit: %s", self.unit_path)

        result = InstallResult(unit_path=self.unit_path, exec_start=self.exec_start)

        for command in (
            ["systemctl", "--user", "daemon-reload"],
            ["systemctl", "--user", "enable", SERVICE_NAME],
        ):
            try:
                completed = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                    check=False,
                )
            except (subprocess.SubprocessError, OSError) as e:
                logger.warning("Failed to run %s: %s", " ".join(command), e)
                result.failed_commands.append(" ".join(command))
                continue

            if completed.returncode != 0:
                logger.warning(
                    "Failed to run %s: %s",
                    " ".join(command),
                    completed.stderr.strip() or f"exit code {completed.returncode}",
                )
                result.failed_commands.append(" ".join(command))

        return result
