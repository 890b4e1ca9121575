"""Services: persistence reconciliation, timer scheduling and analytics."""
