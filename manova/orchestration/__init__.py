from .trigger_aggregator import TriggerAggregator, priority_at_least
from .pipeline import StressPipeline

__all__ = ['TriggerAggregator', 'priority_at_least', 'StressPipeline']
