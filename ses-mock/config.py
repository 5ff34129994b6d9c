"""
config.py - Process Configuration
==================================
Everything the service reads from its environment lives here.

Configuration (environment variables):
  PORT             - HTTP port (default: 8005)
  TEMPLATES_DIR    - Directory holding <name>.json template descriptors
                     (default: email-templates; a relative path is resolved
                     against this directory, not the working directory)
  TEMPLATES_PATH   - Path under the mount root; when set it overrides
                     TEMPLATES_DIR (serverless-offline style layouts)
  TEMPLATES_MOUNT  - Mount root used with TEMPLATES_PATH (default: /sls-offline)
  LOG_LEVEL        - Logging level name (default: INFO)
  MAX_BODY_MB      - Largest accepted request body in MB (default: 25)
"""

import os
from dataclasses import dataclass

SERVICE_DIR = os.path.dirname(os.path.abspath(__file__))


@dataclass
class Config:
    port:            int = 8005
    templates_dir:   str = "email-templates"
    templates_path:  str | None = None
    templates_mount: str = "/sls-offline"
    log_level:       str = "INFO"
    max_body_mb:     int = 25

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            port=int(os.environ.get('PORT', '8005')),
            templates_dir=os.environ.get('TEMPLATES_DIR', 'email-templates'),
            templates_path=os.environ.get('TEMPLATES_PATH') or None,
            templates_mount=os.environ.get('TEMPLATES_MOUNT', '/sls-offline'),
            log_level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
            max_body_mb=int(os.environ.get('MAX_BODY_MB', '25')),
        )

    def templates_location(self) -> str:
        """Directory template descriptors are read from."""
        if self.templates_path:
            return os.path.join(self.templates_mount, self.templates_path.lstrip('/'))
        return os.path.join(SERVICE_DIR, self.templates_dir)

    def summary(self) -> dict:
        """Template location as reported in startup logs."""
        strategy = "mount" if self.templates_path else "directory"
        return {"strategy": strategy, "location": self.templates_location()}
