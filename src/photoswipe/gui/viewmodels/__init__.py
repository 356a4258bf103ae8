from .base import BaseViewModel
from .review_viewmodel import ReviewViewModel
from .signal import ObservableProperty, Signal

__all__ = ["BaseViewModel", "ObservableProperty", "ReviewViewModel", "Signal"]
