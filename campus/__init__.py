"""Campus website: public listings plus an admin area backed by a JSON document."""
