"""create_presupuesto_ejecutivo_tables

Crea el catálogo de cuentas (mayor / partida / subpartida), el presupuesto
paramétrico y el desglose ejecutivo (partida + subpartida).

Revision ID: c4e7a1b9d2f0
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c4e7a1b9d2f0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'chart_of_accounts_mayor',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('codigo', sa.String(20), nullable=False),
        sa.Column('nombre', sa.String(255), nullable=False),
        sa.Column('departamento', sa.String(100), nullable=True),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'chart_of_accounts_partidas',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('mayor_id', sa.String(36), sa.ForeignKey('chart_of_accounts_mayor.id'), nullable=False),
        sa.Column('codigo', sa.String(20), nullable=False),
        sa.Column('nombre', sa.String(255), nullable=False),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'chart_of_accounts_subpartidas',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('partida_id', sa.String(36), sa.ForeignKey('chart_of_accounts_partidas.id'), nullable=True),
        sa.Column('codigo', sa.String(20), nullable=False),
        sa.Column('nombre', sa.String(255), nullable=False),
        sa.Column('departamento_aplicable', sa.String(100), nullable=True),
        sa.Column('es_global', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'presupuesto_parametrico',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('cliente_id', sa.String(36), nullable=False),
        sa.Column('proyecto_id', sa.String(36), nullable=False),
        sa.Column('departamento', sa.String(100), nullable=False),
        sa.Column('mayor_id', sa.String(36), sa.ForeignKey('chart_of_accounts_mayor.id'), nullable=True),
        sa.Column('partida_id', sa.String(36), sa.ForeignKey('chart_of_accounts_partidas.id'), nullable=True),
        sa.Column('cantidad_requerida', sa.Numeric(15, 4), nullable=False, server_default='0'),
        sa.Column('precio_unitario', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('monto_total', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_presupuesto_parametrico_cliente_id', 'presupuesto_parametrico', ['cliente_id'])
    op.create_index('ix_presupuesto_parametrico_proyecto_id', 'presupuesto_parametrico', ['proyecto_id'])

    op.create_table(
        'presupuesto_ejecutivo_partida',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('cliente_id', sa.String(36), nullable=False),
        sa.Column('proyecto_id', sa.String(36), nullable=False),
        sa.Column(
            'parametrico_id', sa.String(36),
            sa.ForeignKey('presupuesto_parametrico.id', ondelete='CASCADE'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_presupuesto_ejecutivo_partida_cliente_id', 'presupuesto_ejecutivo_partida', ['cliente_id'])
    op.create_index('ix_presupuesto_ejecutivo_partida_proyecto_id', 'presupuesto_ejecutivo_partida', ['proyecto_id'])

    op.create_table(
        'presupuesto_ejecutivo_subpartida',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('cliente_id', sa.String(36), nullable=False),
        sa.Column('proyecto_id', sa.String(36), nullable=False),
        sa.Column(
            'partida_ejecutivo_id', sa.String(36),
            sa.ForeignKey('presupuesto_ejecutivo_partida.id', ondelete='CASCADE'),
            nullable=True,
        ),
        sa.Column('subpartida_id', sa.String(36), sa.ForeignKey('chart_of_accounts_subpartidas.id'), nullable=True),
        sa.Column('codigo_snapshot', sa.String(20), nullable=True),
        sa.Column('nombre_snapshot', sa.String(255), nullable=True),
        sa.Column('unidad', sa.String(20), nullable=True),
        sa.Column('cantidad', sa.Numeric(15, 4), nullable=False, server_default='0'),
        sa.Column('precio_unitario', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('importe', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_presupuesto_ejecutivo_subpartida_cliente_id', 'presupuesto_ejecutivo_subpartida', ['cliente_id'])
    op.create_index('ix_presupuesto_ejecutivo_subpartida_proyecto_id', 'presupuesto_ejecutivo_subpartida', ['proyecto_id'])


def downgrade() -> None:
    op.drop_table('presupuesto_ejecutivo_subpartida')
    op.drop_table('presupuesto_ejecutivo_partida')
    op.drop_table('presupuesto_parametrico')
    op.drop_table('chart_of_accounts_subpartidas')
    op.drop_table('chart_of_accounts_partidas')
    op.drop_table('chart_of_accounts_mayor')
