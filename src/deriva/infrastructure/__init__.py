"""Infrastructure layer: registries, declaration files, the workspace."""
