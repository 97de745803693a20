"""Write packages into the store, one transaction per package.

Rows are inserted parents first and every generated key is threaded into
the child rows that reference it. If any insert for a package fails the
whole package is rolled back and PackageWriteError names its directory.
"""

import sqlite3
from collections.abc import Iterable

from fleetindex.packages.ecs import EcsDictionary
from fleetindex.packages.model import DataStream, Field, Package, PolicyTemplate, Transform, Var
from fleetindex.utils.logging import logger

from . import projector
from .database import DatabaseManager
from .exceptions import MappingError, PackageWriteError, PersistenceError
from .processors import flatten_pipeline


class PackageWriter:
    """Inserts one package's row graph through a DatabaseManager."""

    def __init__(self, db: DatabaseManager, ecs: EcsDictionary | None = None):
        self.db = db
        self.ecs = ecs or EcsDictionary()

    def write(self, pkg: Package) -> int:
        """Write pkg inside its own transaction and return the integration id.

        Raises:
            PackageWriteError: any mapping or insert error; nothing of pkg is kept
        """
        try:
            with self.db.transaction():
                integration_id = self._insert_package(pkg)
        except (MappingError, PersistenceError, sqlite3.Error, ValueError) as e:
            raise PackageWriteError(pkg.dir_name, e) from e
        logger.debug("Wrote package {dir} as integration {id}", dir=pkg.dir_name, id=integration_id)
        return integration_id

    # -- package ------------------------------------------------------------

    def _insert_package(self, pkg: Package) -> int:
        db = self.db
        m = pkg.manifest
        integration_id = db.insert("integrations", projector.integration_row(pkg))

        for category in m.categories:
            db.insert("integration_categories", projector.category_row("integration_id", integration_id, category))
        for icon in m.icons:
            db.insert("integration_icons", projector.icon_row("integration_id", integration_id, icon))
        for screenshot in m.screenshots:
            db.insert(
                "integration_screenshots",
                projector.screenshot_row("integration_id", integration_id, screenshot),
            )
        for name in m.discovery_fields:
            db.insert("discovery_fields", projector.discovery_field_row(integration_id, name))

        if pkg.build is not None:
            db.insert("build_manifests", projector.build_manifest_row(integration_id, pkg.build))

        self._insert_vars(m.vars, "integration_vars", "integration_id", integration_id)

        for pt in m.policy_templates:
            self._insert_policy_template(integration_id, pt)

        for ds in pkg.data_streams:
            self._insert_data_stream(integration_id, ds, pkg.ecs_reference)

        for transform in pkg.transforms:
            self._insert_transform(integration_id, transform, pkg.ecs_reference)

        if pkg.changelog is not None:
            changelog_id = db.insert("changelogs", projector.changelog_row(integration_id, pkg.changelog))
            for release in pkg.changelog.releases:
                release_id = db.insert("releases", projector.release_row(changelog_id, release))
                for change in release.changes:
                    db.insert("changes", projector.change_row(release_id, change))

        return integration_id

    # -- vars ---------------------------------------------------------------

    def _insert_var(self, var: Var) -> int:
        var_id = self.db.insert("vars", projector.var_row(var))
        for option in var.options:
            self.db.insert("var_options", projector.var_option_row(var_id, option))
        return var_id

    def _insert_vars(self, variables: Iterable[Var], join_table: str, owner_column: str, owner_id: int) -> None:
        for var in variables:
            var_id = self._insert_var(var)
            self.db.insert(join_table, projector.var_join_row(owner_column, owner_id, var_id))

    # -- policy templates ---------------------------------------------------

    def _insert_policy_template(self, integration_id: int, pt: PolicyTemplate) -> None:
        db = self.db
        pt_id = db.insert("policy_templates", projector.policy_template_row(integration_id, pt))

        for category in pt.categories:
            db.insert("policy_template_categories", projector.category_row("policy_template_id", pt_id, category))
        for ds_name in pt.data_streams:
            db.insert(
                "policy_template_data_streams",
                projector.policy_template_data_stream_row(pt_id, ds_name),
            )
        for icon in pt.icons:
            db.insert("policy_template_icons", projector.icon_row("policy_template_id", pt_id, icon))
        for screenshot in pt.screenshots:
            db.insert(
                "policy_template_screenshots",
                projector.screenshot_row("policy_template_id", pt_id, screenshot),
            )

        self._insert_vars(pt.vars, "policy_template_vars", "policy_template_id", pt_id)

        for pt_input in pt.inputs:
            input_id = db.insert("policy_template_inputs", projector.policy_template_input_row(pt_id, pt_input))
            self._insert_vars(
                pt_input.vars,
                "policy_template_input_vars",
                "policy_template_input_id",
                input_id,
            )

    # -- data streams -------------------------------------------------------

    def _insert_field(self, f: Field, ecs_reference: str) -> int:
        external_def = None
        if f.external == "ecs" and ecs_reference:
            external_def = self.ecs.lookup(f.name, ecs_reference)
        return self.db.insert("fields", projector.field_row(f, external_def))

    def _insert_data_stream(self, integration_id: int, ds: DataStream, ecs_reference: str) -> None:
        db = self.db
        ds_id = db.insert("data_streams", projector.data_stream_row(integration_id, ds))

        for stream in ds.manifest.streams:
            stream_id = db.insert("streams", projector.stream_row(ds_id, stream))
            self._insert_vars(stream.vars, "stream_vars", "stream_id", stream_id)

        for f in ds.fields:
            field_id = self._insert_field(f, ecs_reference)
            db.insert("data_stream_fields", projector.data_stream_field_row(ds_id, field_id, f))

        for pipeline in ds.pipelines:
            pipeline_id = db.insert("ingest_pipelines", projector.ingest_pipeline_row(ds_id, pipeline))
            for proc in flatten_pipeline(pipeline.processors, pipeline.on_failure):
                db.insert("ingest_processors", projector.ingest_processor_row(pipeline_id, proc))

        if ds.sample_event is not None:
            db.insert("sample_events", projector.sample_event_row(ds_id, ds.sample_event))

    # -- transforms ---------------------------------------------------------

    def _insert_transform(self, integration_id: int, t: Transform, ecs_reference: str) -> None:
        db = self.db
        transform_id = db.insert("transforms", projector.transform_row(integration_id, t))

        for f in t.fields:
            field_id = self._insert_field(f, ecs_reference)
            db.insert("transform_fields", projector.transform_field_row(transform_id, field_id))

        if t.definition is not None and t.definition.dest is not None:
            for alias in t.definition.dest.aliases:
                db.insert("transform_dest_aliases", projector.transform_dest_alias_row(transform_id, alias))


def write_packages(db: DatabaseManager, packages: Iterable[Package], ecs: EcsDictionary | None = None) -> int:
    """Create the schema, then write every package in its own transaction.

    Returns the number of packages written.

    Raises:
        PersistenceError: the schema could not be created
        PackageWriteError: a package failed; earlier packages stay committed
    """
    try:
        db.create_schema()
    except sqlite3.Error as e:
        raise PersistenceError(f"failed creating tables: {e}") from e

    writer = PackageWriter(db, ecs)
    count = 0
    for pkg in packages:
        writer.write(pkg)
        count += 1
    return count
