"""
Tests for the template router — routing rules, suppression, de-duplication.
"""

from cloudgen.core.generator.router import RouteRule, TemplateRouter
from cloudgen.core.models.configuration import ApplicationConfiguration
from cloudgen.core.models.target import Target
from cloudgen.core.models.template import ConfigTemplate, TextTemplate


def text(module, path="file.txt", content=""):
    return TextTemplate(module=module, path=path, content=content)


class TestRouting:
    def test_cluster_manifest_goes_to_root(self):
        router = TemplateRouter(platform_independent=False)
        assert router.register("k8sYaml", text("default", "k8s.yml"), Target.AWS)
        assert router.get("k8sYaml").module == ""
        assert router.get("k8sYaml").output_path == "k8s.yml"

    def test_target_scope_reroutes_and_suffixes_key(self):
        router = TemplateRouter(platform_independent=False)
        router.register("application", text("default", "src/main/java/App.java"), Target.AWS)
        assert "application" not in router
        assert router.get("application-aws").module == "aws"

    def test_target_scope_keeps_own_module(self):
        router = TemplateRouter(platform_independent=False)
        router.register("config", text("gcp"), Target.GCP)
        assert router.get("config").module == "gcp"

    def test_root_declaration_kept_in_target_scope(self):
        router = TemplateRouter(platform_independent=False)
        router.register("readme", text("", "README.md"), Target.OCI)
        assert router.get("readme").module == ""

    def test_platform_independent_collapses_to_root(self):
        router = TemplateRouter(platform_independent=True)
        router.register("a", text("lib", "a.txt"))
        router.register("b", text("default", "b.txt"))
        router.register("c", text("app", "c.txt"))
        assert [t.module for t in router.templates.values()] == ["", "", ""]

    def test_default_resolves_to_lib(self):
        router = TemplateRouter(platform_independent=False)
        router.register("build", text("default", "build.gradle"))
        assert router.get("build").output_path == "lib/build.gradle"

    def test_other_module_kept(self):
        router = TemplateRouter(platform_independent=False)
        router.register("build-aws", text("aws", "build.gradle"))
        assert router.get("build-aws").module == "aws"

    def test_custom_rules(self):
        rules = (RouteRule("everything-to-docs", lambda r: True, lambda r: (r.key, "docs")),)
        router = TemplateRouter(platform_independent=False, rules=rules)
        router.register("x", text("lib"))
        assert router.get("x").module == "docs"


class TestSuppression:
    def test_app_templates_dropped_from_shared(self):
        router = TemplateRouter(platform_independent=False)
        assert not router.register("application", text("default", "App.java"))
        assert not router.register("applicationTest", text("default", "AppTest.java"))
        assert not router.register("loggingConfig", text("default", "logback.xml"))
        assert len(router) == 0

    def test_lib_application_config_dropped(self):
        router = TemplateRouter(platform_independent=False)
        template = ConfigTemplate(
            module="lib", path="src/main/resources/application.properties",
            config=ApplicationConfiguration(),
        )
        assert not router.register("application-config", template)

    def test_suppression_off_when_platform_independent(self):
        router = TemplateRouter(platform_independent=True)
        assert router.register("application", text("default", "App.java"))
        assert router.get("application").module == ""

    def test_target_scope_default_module_dropped(self):
        router = TemplateRouter(platform_independent=False)
        assert not router.register("application", text("default", "src/main/java/App.java"), Target.AWS)
        assert not router.register("loggingConfig", text("default", "logback.xml"), Target.AZURE)
        assert len(router) == 0

    def test_target_module_declaration_kept(self):
        router = TemplateRouter(platform_independent=False)
        assert router.register("loggingConfig-azure", text("azure", "logback.xml"), Target.AZURE)
        assert router.get("loggingConfig-azure").output_path == "azure/logback.xml"


class TestDeduplication:
    def test_first_registration_wins(self):
        router = TemplateRouter(platform_independent=False)
        assert router.register("k8sYaml", text("default", "k8s.yml", "first"), Target.AWS)
        assert not router.register("k8sYaml", text("default", "k8s.yml", "second"), Target.AZURE)
        assert router.get("k8sYaml").render() == "first"

    def test_same_path_different_key_dropped(self):
        router = TemplateRouter(platform_independent=False)
        router.register("one", text("lib", "x.txt"))
        assert not router.register("two", text("lib", "x.txt"))
        assert "two" not in router

    def test_unregister_frees_path(self):
        router = TemplateRouter(platform_independent=False)
        router.register("one", text("lib", "x.txt", "old"))
        router.unregister("one")
        assert not router.is_registered("lib", "x.txt")
        assert router.register("two", text("lib", "x.txt", "new"))
        assert router.get("two").render() == "new"

    def test_reregister_key_at_new_path(self):
        router = TemplateRouter(platform_independent=False)
        router.register("one", text("lib", "a.txt"))
        assert router.register("one", text("lib", "b.txt"))
        assert router.get("one").path == "b.txt"
        assert not router.is_registered("lib", "a.txt")

    def test_templates_sorted_by_key(self):
        router = TemplateRouter(platform_independent=False)
        router.register("zeta", text("lib", "z.txt"))
        router.register("alpha", text("lib", "a.txt"))
        assert list(router.templates) == ["alpha", "zeta"]
        assert list(router.by_path()) == [("lib", "a.txt"), ("lib", "z.txt")]
