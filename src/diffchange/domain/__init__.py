"""Pure reconciliation domain: records, operations, filters and views."""
