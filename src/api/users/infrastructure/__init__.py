"""Users infrastructure layer: PostgreSQL persistence for User aggregates."""
