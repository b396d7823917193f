"""Bronze → silver cleansing engine for CRM/ERP extracts.

Modules:
    config       - Label tables, fallbacks and runtime settings.
    schemas      - Bronze and silver column schemas.
    transform    - Normalizers, validator, deduplicator, repairer.
    entities     - One transform pipeline per CRM/ERP entity.
    load_silver  - Runs the pipelines and replaces silver outputs.
"""

__version__ = "1.0.0"
