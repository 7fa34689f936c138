"""Abstract base class for calendar transformers."""

from abc import ABC, abstractmethod
from datetime import tzinfo
from typing import Any

from scheduler.types import ScheduledEvent


class BaseTransformer(ABC):
    """Abstract base class defining the interface for calendar transformers.
    
    Extend this class to implement transformers for different output formats
    (e.g., iCalendar, CSV, JSON, etc.).
    """
    
    @abstractmethod
    def transform(self, events: list[ScheduledEvent], tz: tzinfo) -> Any:
        """Transform scheduled events into the target format.
        
        Args:
            events: Rescheduled events, fillers and holidays.
            tz: Calendar timezone.
            
        Returns:
            Transformed data in the target format.
        """
        pass
    
    @abstractmethod
    def save(self, output_path: str) -> None:
        """Save the transformed data to a new file.
        
        Args:
            output_path: Path to the output file.
        """
        pass
