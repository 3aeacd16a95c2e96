"""PromptOps - versioned Framework/Prompt documents with portable archives.

This service manages user-authored documents and moves them between installs:
- Framework and Prompt definitions (versioned, migrated on read)
- Front-matter Markdown encoding for single documents
- Zip archives with an order/sharing manifest (export, full and diff import)
"""

__version__ = "0.1.0"
