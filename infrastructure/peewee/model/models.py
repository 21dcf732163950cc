from peewee import CharField, DateTimeField, IntegerField, Model, TextField, UUIDField


class TaskModel(Model):
    id = UUIDField(primary_key=True)
    title = CharField(max_length=200)
    description = TextField(null=True)
    status = CharField(max_length=16, default="Pending", index=True)
    due_date = DateTimeField(null=True, index=True)
    created_at = DateTimeField(index=True)
    updated_at = DateTimeField()
    version = IntegerField(default=1)

    class Meta:
        # La base se enlaza en PeeweeTaskRepository.__init__
        table_name = "tasks"
