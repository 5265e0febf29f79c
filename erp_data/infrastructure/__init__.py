"""Infrastructure layer: record sources, repositories and local persistence."""
