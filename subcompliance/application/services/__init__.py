"""Pure engine services: catalog, rule engine, aggregator, reminder policy, profile adapter."""
