from git_versioning.strs import slugify, tokenize


def test_tokenize():
    assert list(tokenize("versioning.preferTags")) == ["versioning", "prefer", "tags"]
    assert list(tokenize("HelloWorld", "hello_world", lower=False)) == ["Hello", "World", "hello", "world"]
    assert list(tokenize("HelloWorld", camel_case=False)) == ["helloworld"]
    assert list(tokenize(None, "", " ")) == []


def test_slugify():
    assert slugify("Feature/Login") == "feature-login"
    assert slugify("v1.0.0") == "v1.0.0"
