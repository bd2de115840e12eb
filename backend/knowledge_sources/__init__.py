"""Knowledge source loaders (FAQ sheet, SOP folder)"""
from knowledge_sources.errors import KnowledgeSourceError
from knowledge_sources.faq_sheet import FaqSheetSource
from knowledge_sources.procedure_docs import ProcedureFolderSource
