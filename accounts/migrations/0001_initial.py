import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "username",
                    models.CharField(
                        error_messages={"blank": "Username is required", "unique": "Username already exists"},
                        max_length=50,
                        unique=True,
                        validators=[
                            django.core.validators.MinLengthValidator(3, message="Username must be between 3 and 50 characters"),
                            django.core.validators.MaxLengthValidator(50, message="Username must be between 3 and 50 characters"),
                            django.core.validators.RegexValidator(
                                "^[a-zA-Z0-9_]+$",
                                message="Username can only contain letters, numbers, and underscores",
                            ),
                        ],
                    ),
                ),
                (
                    "email",
                    models.CharField(
                        error_messages={"blank": "Email is required", "unique": "Email already exists"},
                        max_length=100,
                        unique=True,
                        validators=[
                            django.core.validators.EmailValidator(message="Email must be valid"),
                            django.core.validators.MaxLengthValidator(100, message="Email must not exceed 100 characters"),
                        ],
                    ),
                ),
                (
                    "password_hash",
                    models.CharField(
                        db_column="password_hash",
                        error_messages={"blank": "Password hash is required"},
                        max_length=255,
                        validators=[
                            django.core.validators.MinLengthValidator(8, message="Password hash must be at least 8 characters"),
                        ],
                    ),
                ),
            ],
            options={
                "db_table": "users",
                "ordering": ("id",),
            },
        ),
    ]
