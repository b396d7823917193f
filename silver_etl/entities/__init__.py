"""Entity transform pipelines."""

from .base import BaseEntityPipeline
from .crm import CustomerPipeline, ProductPipeline, SalesPipeline
from .erp import CategoryPipeline, CustomerDemographicsPipeline, LocationPipeline

ENTITY_PIPELINES = {
    pipeline.entity: pipeline
    for pipeline in (
        CustomerPipeline,
        ProductPipeline,
        SalesPipeline,
        CustomerDemographicsPipeline,
        LocationPipeline,
        CategoryPipeline,
    )
}

__all__ = [
    "BaseEntityPipeline",
    "CustomerPipeline",
    "ProductPipeline",
    "SalesPipeline",
    "CustomerDemographicsPipeline",
    "LocationPipeline",
    "CategoryPipeline",
    "ENTITY_PIPELINES",
]
