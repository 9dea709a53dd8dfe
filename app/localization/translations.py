"""Message catalog keyed by locale."""

TRANSLATIONS = {
    "en": {
        # Errors
        "errors.resource_not_found": "Resource not found",
        "errors.not_authenticated": "Not authenticated",
        "errors.permission_denied": "Permission denied",
        "errors.validation_error": "Validation error",
        "errors.resource_conflict": "Resource already exists",
        "errors.task_not_found": "Task not found",
        "errors.project_not_found": "Project not found",
        "errors.comment_not_found": "Comment not found",
        "errors.notification_not_found": "Notification not found",
        "errors.assignee_not_found": "Assigned user not found",
        "errors.task_update_forbidden": "You can only update tasks you created",
        "errors.task_delete_forbidden": "You can only delete tasks you created",
        "errors.project_update_forbidden": "You can only update projects you created",
        "errors.project_delete_forbidden": "You can only delete projects you created",
        "errors.project_view_forbidden": "You don't have permission to view this project",
        "errors.comment_delete_forbidden": "You can only delete your own comments or comments on your tasks",
        "errors.notification_forbidden": "You can only manage your own notifications",
        # Direct notifications
        "notifications.task_assigned": "New task assigned: {title}",
        "notifications.task_reassigned": "Task reassigned: {title}",
        "notifications.task_completed": "Task completed: {title}",
        "notifications.comment_added": "New comment on task: {title}",
        # Admin fan-out
        "admin.project_created": "{actor} created the project: {project}",
        "admin.project_deleted": "{actor} deleted the project: {project}",
        "admin.task_created": "{actor} created the task: {task}",
        "admin.task_updated": "{actor} updated the task: {task}",
        "admin.task_deleted": "{actor} deleted the task: {task}",
        "admin.comment_added": "{actor} commented on the task: {task}",
        "admin.unknown_value": "unknown",
        "admin.unknown_user": "Unknown User",
        # Sweep tags
        "sweep.project_created": "[PROJECT CREATED]",
        "sweep.project_deleted": "[PROJECT DELETED]",
        "sweep.task_created": "[TASK CREATED]",
        "sweep.task_updated": "[TASK UPDATED]",
        "sweep.task_deleted": "[TASK DELETED]",
        "sweep.comment_added": "[COMMENT ADDED]",
    },
    "es": {
        # Errors
        "errors.resource_not_found": "Recurso no encontrado",
        "errors.not_authenticated": "No autenticado",
        "errors.permission_denied": "Permiso denegado",
        "errors.validation_error": "Error de validación",
        "errors.resource_conflict": "El recurso ya existe",
        "errors.task_not_found": "Tarea no encontrada",
        "errors.project_not_found": "Proyecto no encontrado",
        "errors.comment_not_found": "Comentario no encontrado",
        "errors.notification_not_found": "Notificación no encontrada",
        "errors.assignee_not_found": "Usuario asignado no encontrado",
        "errors.task_update_forbidden": "Solo puedes actualizar tareas que creaste",
        "errors.task_delete_forbidden": "Solo puedes eliminar tareas que creaste",
        "errors.project_update_forbidden": "Solo puedes actualizar proyectos que creaste",
        "errors.project_delete_forbidden": "Solo puedes eliminar proyectos que creaste",
        "errors.project_view_forbidden": "No tienes permiso para ver este proyecto",
        "errors.comment_delete_forbidden": "Solo puedes eliminar tus comentarios o los de tus tareas",
        "errors.notification_forbidden": "Solo puedes gestionar tus propias notificaciones",
        # Direct notifications
        "notifications.task_assigned": "Nueva tarea asignada: {title}",
        "notifications.task_reassigned": "Tarea reasignada: {title}",
        "notifications.task_completed": "Tarea completada: {title}",
        "notifications.comment_added": "Nuevo comentario en la tarea: {title}",
        # Admin fan-out
        "admin.project_created": "{actor} creó el proyecto: {project}",
        "admin.project_deleted": "{actor} eliminó el proyecto: {project}",
        "admin.task_created": "{actor} creó la tarea: {task}",
        "admin.task_updated": "{actor} actualizó la tarea: {task}",
        "admin.task_deleted": "{actor} eliminó la tarea: {task}",
        "admin.comment_added": "{actor} comentó en la tarea: {task}",
        "admin.unknown_value": "desconocido",
        "admin.unknown_user": "Usuario desconocido",
        # Sweep tags
        "sweep.project_created": "[PROYECTO CREADO]",
        "sweep.project_deleted": "[PROYECTO ELIMINADO]",
        "sweep.task_created": "[TAREA CREADA]",
        "sweep.task_updated": "[TAREA ACTUALIZADA]",
        "sweep.task_deleted": "[TAREA ELIMINADA]",
        "sweep.comment_added": "[COMENTARIO AGREGADO]",
    },
}
