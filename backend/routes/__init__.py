"""HTTP routers mounted by main."""
