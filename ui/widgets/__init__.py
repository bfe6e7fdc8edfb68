# UI widgets module

from ui.widgets.card_result_widget import CardResultWidget

__all__ = ['CardResultWidget']
