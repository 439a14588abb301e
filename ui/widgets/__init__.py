from ui.widgets.lesson_list import LessonList

__all__ = ["LessonList"]
