"""Supporting modules: config, snapshot, schema validation, stats."""
