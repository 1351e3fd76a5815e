from file_drive.models.objects import object_table

__all__ = ["object_table"]
