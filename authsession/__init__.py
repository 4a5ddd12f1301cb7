"""Client de session authentifiée pour applications de bureau."""
