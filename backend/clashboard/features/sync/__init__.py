"""Full player sync: storage, analytics and goal progress."""
