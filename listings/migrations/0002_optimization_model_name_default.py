from django.db import migrations, models

import listings.models


class Migration(migrations.Migration):

    dependencies = [
        ("listings", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="optimization",
            name="model_name",
            field=models.CharField(
                db_index=True,
                default=listings.models.default_model_name,
                max_length=50,
            ),
        ),
    ]
