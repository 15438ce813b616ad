"""Pure declaration layer: specs, schemas, and the schema registry. No I/O."""
