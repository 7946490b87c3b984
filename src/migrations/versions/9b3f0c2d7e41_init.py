"""init

Revision ID: 9b3f0c2d7e41
Revises:
Create Date: 2026-10-17 10:12:31.504118

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9b3f0c2d7e41'
down_revision = None
branch_labels = None
depends_on = None

VEHICLE_TABLES = ('cars', 'bikes', 'trucks')


def _listing_columns():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('seller_id', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('is_best_offer', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['seller_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    ]


def _vehicle_columns(with_doors):
    cols = [
        sa.Column('make', sa.String(length=100), nullable=True),
        sa.Column('model', sa.String(length=255), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('body_type', sa.String(length=50), nullable=True),
        sa.Column('fuel_type', sa.String(length=50), nullable=True),
        sa.Column('transmission', sa.String(length=50), nullable=True),
        sa.Column('engine', sa.String(length=255), nullable=True),
        sa.Column('color', sa.String(length=50), nullable=True),
        sa.Column('co2_emissions', sa.String(length=50), nullable=True),
        sa.Column('mileage', sa.Integer(), nullable=True),
        sa.Column('vin_number', sa.String(length=100), nullable=True),
        sa.Column('equipment', sa.JSON(), nullable=False),
        sa.Column('cylindrics', sa.Integer(), nullable=True),
        sa.Column('hp_kw', sa.String(length=50), nullable=True),
    ]
    if with_doors:
        cols.append(sa.Column('doors', sa.Integer(), nullable=True))
    return cols


def _listing_indexes(table):
    with op.batch_alter_table(table, schema=None) as batch_op:
        batch_op.create_index(batch_op.f(f'ix_{table}_seller_id'), ['seller_id'], unique=False)
        batch_op.create_index(batch_op.f(f'ix_{table}_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f(f'ix_{table}_price'), ['price'], unique=False)
        batch_op.create_index(batch_op.f(f'ix_{table}_created_at'), ['created_at'], unique=False)
        if table in VEHICLE_TABLES:
            batch_op.create_index(batch_op.f(f'ix_{table}_year'), ['year'], unique=False)
            batch_op.create_index(f'idx_{table}_make_model', ['make', 'model'], unique=False)
            batch_op.create_index(f'idx_{table}_body_type', ['body_type'], unique=False)
            batch_op.create_index(f'idx_{table}_fuel_type', ['fuel_type'], unique=False)


def upgrade():
    # USERS
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)
        batch_op.create_index(batch_op.f('ix_users_created_at'), ['created_at'], unique=False)

    # LISTINGS
    op.create_table('cars', *_listing_columns(), *_vehicle_columns(with_doors=True))
    op.create_table('bikes', *_listing_columns(), *_vehicle_columns(with_doors=False))
    op.create_table('trucks', *_listing_columns(), *_vehicle_columns(with_doors=True))
    op.create_table(
        'parts',
        *_listing_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('brand', sa.String(length=100), nullable=False),
        sa.Column('compatibility', sa.String(length=255), nullable=False),
        sa.Column('condition', sa.String(length=50), nullable=False),
        sa.Column('warranty', sa.String(length=100), nullable=False),
    )
    for table in VEHICLE_TABLES + ('parts',):
        _listing_indexes(table)

    # FAVORITES
    op.create_table(
        'favorites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('car_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['car_id'], ['cars.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'car_id', name='uq_favorites_user_car')
    )
    with op.batch_alter_table('favorites', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_favorites_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_favorites_car_id'), ['car_id'], unique=False)

    # INQUIRIES
    op.create_table(
        'inquiries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('car_id', sa.Integer(), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('seller_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['car_id'], ['cars.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['buyer_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['seller_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('inquiries', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_inquiries_car_id'), ['car_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_inquiries_buyer_id'), ['buyer_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_inquiries_seller_id'), ['seller_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_inquiries_created_at'), ['created_at'], unique=False)

    # RECENTLY VIEWED / SEARCH ALERTS (no routes yet)
    op.create_table(
        'recently_viewed',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('car_id', sa.Integer(), nullable=False),
        sa.Column('viewed_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['car_id'], ['cars.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'car_id', name='uq_recently_viewed_user_car')
    )
    with op.batch_alter_table('recently_viewed', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recently_viewed_user_id'), ['user_id'], unique=False)

    op.create_table(
        'search_alerts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('criteria', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'category', name='uq_search_alerts_user_category')
    )
    with op.batch_alter_table('search_alerts', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_search_alerts_user_id'), ['user_id'], unique=False)


def downgrade():
    # dependents first, users last
    for table in ('search_alerts', 'recently_viewed', 'inquiries', 'favorites',
                  'parts', 'trucks', 'bikes', 'cars'):
        op.drop_table(table)

    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_users_created_at'))
        batch_op.drop_index(batch_op.f('ix_users_email'))
    op.drop_table('users')
