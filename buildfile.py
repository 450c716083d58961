# buildfile.py
# Build graph for the Fuel library: compile, bundle, test, publish.
from __future__ import annotations

from betterbuild.dsl import build, group, sequence, task
from betterbuild.steps.bundle import BundleAll, BundleOptions, BundleStep
from betterbuild.steps.clean import CleanStep
from betterbuild.steps.compile import CompileStep
from betterbuild.steps.publish import PublishStep
from betterbuild.steps.serve import ServeStep, StopServeStep
from betterbuild.steps.test import karma, mocha

WATCH = ["src/**/*", "_references.ts"]

TEST_BUNDLES = ("src/**/__tests__/*.spec.ts*",)


def tasks():
    return build(
        task("clean", CleanStep(paths=("dist", "dist-test"))),

        # compile
        task("typescript", CompileStep(), description="lib/ without tests or benchmarks"),
        task("typescript-test", CompileStep(name="typescript-test", project="tsconfig.test.json", source_maps=True)),

        # bundle
        task(
            "minify",
            BundleStep("lib/index.js", options=BundleOptions(minify=True, include_builtins=False, report_size=True)),
            needs=["typescript"],
        ),
        task(
            "minify-debug",
            BundleStep("lib/index.js", options=BundleOptions(source_maps=True, include_builtins=False)),
            needs=["typescript"],
        ),
        # test bundles live apart from dist so release runs clean only once
        task("bundle-all-tests", BundleAll(TEST_BUNDLES, out_dir="dist-test")),

        # tests
        task("test", mocha(), needs=["typescript-test"]),
        task("run-test-chrome", karma("Chrome")),
        task("run-test-phantom", karma("PhantomJS")),
        task("test-debug", karma("PhantomJS_debug")),
        task("tdd", karma("PhantomJS", single_run=False)),
        task("tdd-chrome", karma("Chrome", single_run=False)),
        sequence("test-phantom", "clean", "bundle-all-tests", "run-test-phantom"),
        sequence("test-chrome", "clean", "bundle-all-tests", "run-test-chrome"),

        # dev server
        task("serve", ServeStep(("npx", "http-server", "dist", "-p", "8080"))),
        task("stop-serve", StopServeStep()),

        # release
        task("publish", PublishStep()),
        sequence("release", "test-chrome", "clean", "minify", "publish"),
        group("build", "minify", "minify-debug", description="both bundles"),
        sequence("default", "clean", "minify"),
    )
