"""Calendar fetching, aggregation, search, selection and deletion."""
