"""Import all models so SQLAlchemy metadata knows about them."""
from marketplace.models.base import Base
from marketplace.models.book import Book
from marketplace.models.journal import Journal
from marketplace.models.dataset import Dataset

# Table name -> model, used by the SQL record store
MODELS_BY_TABLE = {
    Book.__tablename__: Book,
    Journal.__tablename__: Journal,
    Dataset.__tablename__: Dataset,
}

__all__ = ["Base", "Book", "Journal", "Dataset", "MODELS_BY_TABLE"]
