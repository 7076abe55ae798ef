"""Record graph construction, reachability and scope filtering."""
