"""JSON Schema generation for schema-registry-policy report models."""
