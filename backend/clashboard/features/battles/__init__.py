"""Battle history feature: normalization, content keys, storage and retention."""
