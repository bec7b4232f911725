"""Access-control building blocks (record/store/matcher/controller)."""
