from todolist.ports.id_provider import IdProvider
from todolist.domain.task import TaskId

class UuidIdProvider(IdProvider):

    def new_id(self) -> TaskId:
        return TaskId.new()
