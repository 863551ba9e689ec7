"""Pure list transforms over loaded transcriptions: filter, sort, paginate, stats, export."""
