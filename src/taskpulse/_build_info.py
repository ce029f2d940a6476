"""Release metadata stamped by the build pipeline."""

APP_VERSION = "0.1.0"
