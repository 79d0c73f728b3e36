# Services package.
#
# Each module exposes the async use cases for one aggregate:
#
#   thread_service   — create a thread, assemble the thread detail view
#   comment_service  — add a comment, soft-delete a comment
#
# Use cases receive their repositories as arguments so the router layer
# decides which implementation (SQL or in-memory) backs a call.
