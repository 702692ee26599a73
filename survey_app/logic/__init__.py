"""Domain logic: validation, repositories, submission and export."""
