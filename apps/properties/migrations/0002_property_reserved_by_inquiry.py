import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("properties", "0001_initial"),
        ("inquiries", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="property",
            name="reserved_by_inquiry",
            field=models.ForeignKey(
                blank=True,
                db_constraint=False,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="inquiries.inquiry",
            ),
        ),
    ]
