"""JDex: folder/item index with a persistent undo/redo journal."""

__version__ = "2.0.0"
