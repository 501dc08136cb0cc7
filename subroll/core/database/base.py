# File: subroll/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry. All feature models (Project, ExportJob) inherit from this.
Base = declarative_base()
